"""
Battle state: grid, units and ability state of one battle.

The state is a pure value. Units live in an id-indexed arena and cells refer
to their occupant by id, so a snapshot serializes without object references
and rehydrates to an equal state.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

import numpy as np

from battlegrid.constants import ACTIVATION_TURNS, ALL_ARCHETYPES, HOME_ROWS, Team
from battlegrid.core.grid import TileGrid
from battlegrid.core.unit import Unit
from battlegrid.core.ability_state import TeamAbilities
from battlegrid.core.events import BattleEvent

logger = logging.getLogger(__name__)


def activation_turn_for(team: Team, row: int) -> int:
    """
    Get the first tick a unit placed on ``row`` may act.

    The home row nearest the enemy acts immediately; each row further back
    waits longer. Units outside their home rows act immediately.
    """
    home = HOME_ROWS[team]
    if row not in home:
        return 0
    front = min(home) if team is Team.PLAYER else max(home)
    depth = abs(row - front)
    return ACTIVATION_TURNS[min(depth, len(ACTIVATION_TURNS) - 1)]


class BattleState:
    """Everything one battle owns: grid, units, abilities and the tick counter."""

    def __init__(self, grid: TileGrid) -> None:
        self.grid = grid
        self.units: Dict[str, Unit] = {}
        self.abilities: Dict[Team, TeamAbilities] = {team: TeamAbilities() for team in Team}
        self.tick: int = 0
        # Side channel for presentation, never serialized
        self.events: List[BattleEvent] = []
        self.event_log: List[BattleEvent] = []

    def add_unit(self, unit: Unit) -> bool:
        """
        Add a unit to the arena and put it on its cell.

        Returns:
            True if added, False if the cell is out of bounds or occupied
        """
        cell = self.grid.get_cell(unit.row, unit.col)
        if cell is None or not cell.is_free():
            logger.debug(f"Cannot add {unit.id} at ({unit.row}, {unit.col})")
            return False
        self.units[unit.id] = unit
        self.grid.place(unit.id, unit.row, unit.col)
        return True

    def get_unit(self, unit_id: Optional[str]) -> Optional[Unit]:
        if unit_id is None:
            return None
        return self.units.get(unit_id)

    def unit_at(self, row: int, col: int) -> Optional[Unit]:
        """Get the unit standing on a coordinate."""
        return self.get_unit(self.grid.occupant_at(row, col))

    def living_units(self, team: Optional[Team] = None) -> List[Unit]:
        """Get living units in arena order, optionally for one team."""
        return [
            u for u in self.units.values()
            if u.is_alive() and (team is None or u.team is team)
        ]

    def alive_counts(self) -> Dict[Team, int]:
        counts = {team: 0 for team in Team}
        for unit in self.living_units():
            counts[unit.team] += 1
        return counts

    def move_unit(self, unit: Unit, row: int, col: int) -> None:
        """Move a unit and keep cell occupancy in sync."""
        if (row, col) == unit.position:
            return
        self.grid.relocate(unit.id, unit.position, (row, col))
        unit.move_to(row, col)

    def remove_unit_from_grid(self, unit: Unit) -> None:
        """Clear a dead unit's cell. The unit stays in the arena for bookkeeping."""
        if self.grid.occupant_at(unit.row, unit.col) == unit.id:
            self.grid.clear(unit.row, unit.col)

    def emit(self, event: BattleEvent) -> None:
        self.events.append(event)
        self.event_log.append(event)

    def to_dict(self) -> Dict[str, Any]:
        """Convert battle state to dictionary for serialization."""
        return {
            'tick': self.tick,
            'grid': self.grid.to_dict(),
            'units': [unit.to_dict() for unit in self.units.values()],
            'abilities': {team.value: abilities.to_dict()
                          for team, abilities in self.abilities.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BattleState':
        """
        Restore battle state from dictionary.

        Args:
            data: Dictionary produced by ``to_dict``

        Returns:
            Restored BattleState instance
        """
        battle = cls(TileGrid.from_dict(data['grid']))
        battle.tick = data.get('tick', 0)
        for unit_data in data.get('units', []):
            unit = Unit.from_dict(unit_data)
            battle.units[unit.id] = unit
        for team_code, ability_data in data.get('abilities', {}).items():
            battle.abilities[Team(team_code)] = TeamAbilities.from_dict(ability_data)
        return battle

    def to_numpy(self) -> Dict[str, np.ndarray]:
        """
        Convert battle state to numpy arrays for learning agents.

        Returns:
            dict with 'terrain' (size x size) and 'units' (size x size x 3) arrays,
            unit channels being archetype code, team (1 player, 2 enemy) and hp percent
        """
        size = self.grid.size
        unit_state = np.zeros((size, size, 3), dtype=np.float32)
        archetype_encoding = {a: i + 1 for i, a in enumerate(ALL_ARCHETYPES)}
        for unit in self.living_units():
            unit_state[unit.row, unit.col, 0] = archetype_encoding[unit.archetype]
            unit_state[unit.row, unit.col, 1] = 1 if unit.team is Team.PLAYER else 2
            unit_state[unit.row, unit.col, 2] = unit.hp_ratio() * 100
        return {
            'terrain': self.grid.to_numpy(),
            'units': unit_state,
            'tick': self.tick,
        }
