"""Pytest configuration and shared fixtures for testing."""
import random

import pytest

from battlegrid.constants import Archetype, Team, TerrainType
from battlegrid.core.battle_state import BattleState
from battlegrid.core.grid import TileGrid
from battlegrid.core.unit import Unit
from battlegrid.game.mechanics import GameMechanics


class FixedRandom(random.Random):
    """Random generator whose ``random()`` always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def rng():
    """Create a seeded random generator."""
    return random.Random(1234)


@pytest.fixture
def always():
    """Random generator on which every probability check succeeds."""
    return FixedRandom(0.0)


@pytest.fixture
def never():
    """Random generator on which every probability check fails."""
    return FixedRandom(0.99)


@pytest.fixture
def battle():
    """Create a battle on a plain 8x8 grid."""
    return BattleState(TileGrid())


@pytest.fixture
def spawn(battle):
    """Factory adding a unit to the battle fixture."""
    counter = {'n': 0}

    def _spawn(archetype, team, row, col):
        counter['n'] += 1
        unit = Unit(f"u{counter['n']}", archetype, team, row, col)
        assert battle.add_unit(unit)
        return unit

    return _spawn


@pytest.fixture
def set_terrain(battle):
    """Factory setting terrain on the battle fixture's grid."""
    def _set(row, col, terrain: TerrainType):
        battle.grid.cells[row][col].terrain = terrain
    return _set


@pytest.fixture
def mechanics():
    """Mechanics without damage variance."""
    return GameMechanics(random.Random(0), damage_variance=False)


@pytest.fixture
def warrior(spawn):
    """Create a player warrior at (6, 3)."""
    return spawn(Archetype.WARRIOR, Team.PLAYER, 6, 3)


@pytest.fixture
def enemy_tank(spawn):
    """Create an enemy tank at (5, 3), adjacent to the warrior fixture."""
    return spawn(Archetype.TANK, Team.ENEMY, 5, 3)
