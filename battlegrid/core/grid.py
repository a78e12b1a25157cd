"""
Battle grid holding terrain and cell occupancy.
"""
from __future__ import annotations
import logging
import random
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from battlegrid.constants import (
    GRID_SIZE, HOME_ROWS, MIDDLE_ROWS, MIDDLE_TERRAIN_MIN, MIDDLE_TERRAIN_MAX,
    FLANK_TERRAIN_MAX, TerrainType
)
from battlegrid.core.tile import Cell

logger = logging.getLogger(__name__)

TERRAIN_ENCODING = {
    TerrainType.NONE: 0,
    TerrainType.FOREST: 1,
    TerrainType.HILL: 2,
    TerrainType.WATER: 3,
}


class TileGrid:
    """Square grid of cells addressed by (row, col)."""

    def __init__(self, size: int = GRID_SIZE) -> None:
        self.size = size
        self.cells: List[List[Cell]] = [
            [Cell(row, col) for col in range(size)] for row in range(size)
        ]

    @classmethod
    def generate(cls, rng: random.Random, size: int = GRID_SIZE) -> 'TileGrid':
        """
        Generate a fresh grid with random terrain for one round.

        The middle rows receive 4-7 tiles mixing forest, hill and water.
        Placement rows may receive up to 3 forest or hill tiles but never water.

        Args:
            rng: Seeded random generator
            size: Grid edge length

        Returns:
            New TileGrid
        """
        grid = cls(size)

        middle = [(r, c) for r in MIDDLE_ROWS if r < size for c in range(size)]
        count = rng.randint(MIDDLE_TERRAIN_MIN, MIDDLE_TERRAIN_MAX)
        for row, col in rng.sample(middle, min(count, len(middle))):
            grid.cells[row][col].terrain = rng.choice(
                [TerrainType.FOREST, TerrainType.HILL, TerrainType.WATER]
            )

        placement = [
            (r, c) for rows in HOME_ROWS.values() for r in rows if r < size for c in range(size)
        ]
        flank_count = rng.randint(0, FLANK_TERRAIN_MAX)
        for row, col in rng.sample(placement, flank_count):
            grid.cells[row][col].terrain = rng.choice([TerrainType.FOREST, TerrainType.HILL])

        logger.debug(f"Generated terrain with {count} middle and {flank_count} flank tiles")
        return grid

    def in_bounds(self, row: int, col: int) -> bool:
        """Check if a coordinate lies on the grid."""
        return 0 <= row < self.size and 0 <= col < self.size

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get the cell at a coordinate, or None when out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def terrain_at(self, row: int, col: int) -> TerrainType:
        """Get the terrain at a coordinate."""
        return self.cells[row][col].terrain

    def occupant_at(self, row: int, col: int) -> Optional[str]:
        """Get the id of the unit on a coordinate."""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col].occupant_id

    def iter_cells(self) -> Iterator[Cell]:
        """Iterate over all cells row by row."""
        for row in self.cells:
            yield from row

    def place(self, unit_id: str, row: int, col: int) -> None:
        """Put a unit id on a cell."""
        self.cells[row][col].occupant_id = unit_id

    def clear(self, row: int, col: int) -> None:
        """Remove whatever occupies a cell."""
        self.cells[row][col].occupant_id = None

    def relocate(self, unit_id: str, src: Tuple[int, int], dst: Tuple[int, int]) -> None:
        """Move an occupant from one cell to another."""
        self.clear(*src)
        self.place(unit_id, *dst)

    def to_numpy(self) -> np.ndarray:
        """Encode terrain as a (size x size) integer array."""
        encoded = np.zeros((self.size, self.size), dtype=np.int8)
        for cell in self.iter_cells():
            encoded[cell.row, cell.col] = TERRAIN_ENCODING[cell.terrain]
        return encoded

    def to_dict(self) -> Dict:
        """Convert grid to dictionary for serialization."""
        return {
            'size': self.size,
            'cells': [cell.to_dict() for cell in self.iter_cells()],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'TileGrid':
        """Create grid from dictionary."""
        grid = cls(data['size'])
        for cell_data in data['cells']:
            cell = Cell.from_dict(cell_data)
            grid.cells[cell.row][cell.col] = cell
        return grid
