"""
Cell class representing one square of the battle grid.
"""
from typing import Optional

from battlegrid.constants import TerrainType


class Cell:
    """A single grid square with fixed terrain and at most one occupant."""

    def __init__(self, row: int, col: int, terrain: TerrainType = TerrainType.NONE) -> None:
        self.row = row
        self.col = col
        self.terrain = terrain
        # Id of the unit standing here, looked up through the battle's unit index
        self.occupant_id: Optional[str] = None

    def is_walkable(self, flying: bool = False) -> bool:
        """Check if a unit may stand on this cell's terrain."""
        return flying or self.terrain.is_walkable()

    def is_free(self, ignore_id: Optional[str] = None) -> bool:
        """Check if the cell has no occupant (other than ``ignore_id``)."""
        return self.occupant_id is None or self.occupant_id == ignore_id

    def to_dict(self):
        """Convert cell to dictionary for serialization."""
        return {
            'row': self.row,
            'col': self.col,
            'terrain': self.terrain.value,
            'occupant_id': self.occupant_id,
        }

    @classmethod
    def from_dict(cls, data):
        """Create cell from dictionary."""
        cell = cls(data['row'], data['col'], TerrainType.from_code(data['terrain']))
        cell.occupant_id = data.get('occupant_id')
        return cell

    def __repr__(self) -> str:
        return f"Cell({self.row}, {self.col}, {self.terrain.value})"
