"""Tests for cells, the grid and terrain generation."""
import random

import numpy as np
import pytest

from battlegrid.constants import (
    FLANK_TERRAIN_MAX, GRID_SIZE, HOME_ROWS, MIDDLE_ROWS, MIDDLE_TERRAIN_MAX,
    MIDDLE_TERRAIN_MIN, Team, TerrainType
)
from battlegrid.core.grid import TileGrid
from battlegrid.core.tile import Cell

PLACEMENT_ROWS = HOME_ROWS[Team.PLAYER] + HOME_ROWS[Team.ENEMY]


@pytest.fixture(params=range(200))
def generated(request):
    """Create a generated grid for each of 200 seeds."""
    return TileGrid.generate(random.Random(request.param))


class TestCell:
    """Test cell passability and occupancy."""

    def test_water_blocks_ground_units(self):
        cell = Cell(0, 0, TerrainType.WATER)
        assert not cell.is_walkable()
        assert cell.is_walkable(flying=True)

    def test_forest_is_walkable(self):
        assert Cell(0, 0, TerrainType.FOREST).is_walkable()

    def test_occupancy(self):
        cell = Cell(0, 0)
        assert cell.is_free()
        cell.occupant_id = 'p1'
        assert not cell.is_free()
        assert cell.is_free(ignore_id='p1')


class TestTerrainGeneration:
    """Test generated terrain."""

    def test_no_water_on_placement_rows(self, generated):
        for row in PLACEMENT_ROWS:
            for col in range(generated.size):
                assert generated.terrain_at(row, col) is not TerrainType.WATER

    def test_middle_tile_count(self, generated):
        count = sum(
            1 for row in MIDDLE_ROWS for col in range(generated.size)
            if generated.terrain_at(row, col) is not TerrainType.NONE
        )
        assert MIDDLE_TERRAIN_MIN <= count <= MIDDLE_TERRAIN_MAX

    def test_flank_tiles(self, generated):
        flank = [
            generated.terrain_at(row, col) for row in PLACEMENT_ROWS
            for col in range(generated.size)
            if generated.terrain_at(row, col) is not TerrainType.NONE
        ]
        assert len(flank) <= FLANK_TERRAIN_MAX
        assert all(t in (TerrainType.FOREST, TerrainType.HILL) for t in flank)

    def test_same_seed_same_terrain(self):
        a = TileGrid.generate(random.Random(7))
        b = TileGrid.generate(random.Random(7))
        assert np.array_equal(a.to_numpy(), b.to_numpy())

    def test_generated_grid_is_empty(self, generated):
        assert all(cell.occupant_id is None for cell in generated.iter_cells())


class TestGridAccess:
    """Test grid lookups."""

    def test_default_size(self):
        grid = TileGrid()
        assert grid.size == GRID_SIZE
        assert len(list(grid.iter_cells())) == GRID_SIZE * GRID_SIZE

    def test_out_of_bounds(self):
        grid = TileGrid()
        assert grid.get_cell(-1, 0) is None
        assert grid.get_cell(0, GRID_SIZE) is None
        assert grid.occupant_at(GRID_SIZE, 0) is None
        assert not grid.in_bounds(GRID_SIZE, 0)

    def test_relocate(self):
        grid = TileGrid()
        grid.place('p1', 6, 3)
        grid.relocate('p1', (6, 3), (5, 3))
        assert grid.occupant_at(6, 3) is None
        assert grid.occupant_at(5, 3) == 'p1'


class TestGridSerialization:
    """Test grid conversion."""

    def test_to_numpy(self):
        grid = TileGrid()
        grid.cells[3][1].terrain = TerrainType.WATER
        grid.cells[4][6].terrain = TerrainType.HILL
        encoded = grid.to_numpy()
        assert encoded.shape == (GRID_SIZE, GRID_SIZE)
        assert encoded.dtype == np.int8
        assert encoded[3, 1] == 3
        assert encoded[4, 6] == 2
        assert encoded.sum() == 5

    def test_round_trip(self, generated):
        restored = TileGrid.from_dict(generated.to_dict())
        assert np.array_equal(restored.to_numpy(), generated.to_numpy())
