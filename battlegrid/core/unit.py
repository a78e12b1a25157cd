"""
Unit class representing a combatant on the grid.
"""
from typing import Optional, Tuple

from battlegrid.constants import (
    ARCHETYPE_DATA, MELEE_ARCHETYPES, RANGED_ARCHETYPES, Archetype, Team
)


class Unit:
    """Represents a unit on the grid."""

    def __init__(self, unit_id: str, archetype: Archetype, team: Team, row: int, col: int):
        """
        Initialize a unit from its archetype template.

        Args:
            unit_id: Identifier, unique within a match
            archetype: Archetype enum member
            team: Owning team
            row: Grid row
            col: Grid column
        """
        data = ARCHETYPE_DATA[archetype]
        self.id = unit_id
        self.archetype = archetype
        self.team = team
        self.row = row
        self.col = col
        self.max_health = data['health']
        self.health = self.max_health
        self.attack = data['attack']
        self.max_cooldown = data['cooldown']
        self.cooldown = 0
        self.frozen_ticks = 0
        self.deceased = False
        self.stuck_ticks = 0
        self.activation_turn = 0
        self.bonded_tank_id: Optional[str] = None
        self.last_target_id: Optional[str] = None

    @property
    def data(self):
        return ARCHETYPE_DATA[self.archetype]

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)

    @property
    def is_melee(self) -> bool:
        return self.archetype in MELEE_ARCHETYPES

    @property
    def is_ranged(self) -> bool:
        return self.archetype in RANGED_ARCHETYPES

    @property
    def flying(self) -> bool:
        return self.data['flying']

    def is_alive(self) -> bool:
        """A unit is alive only with health left and not flagged deceased."""
        return self.health > 0 and not self.deceased

    def is_frozen(self) -> bool:
        """Check if this unit is currently frozen."""
        return self.frozen_ticks > 0

    def hp_ratio(self) -> float:
        return self.health / self.max_health

    def is_strong_vs(self, other: 'Unit') -> bool:
        return other.archetype in self.data['strong_vs']

    def is_weak_vs(self, other: 'Unit') -> bool:
        return other.archetype in self.data['weak_vs']

    def can_attack_from(self, row: int, col: int, target_row: int, target_col: int) -> bool:
        """Check if the attack pattern covers the target when standing on (row, col)."""
        offset = (target_row - row, target_col - col)
        return offset in self.data['attack_pattern']

    def can_attack(self, target: 'Unit') -> bool:
        """Check if the unit can hit the target from its current cell."""
        return self.can_attack_from(self.row, self.col, target.row, target.col)

    def take_damage(self, damage: int) -> bool:
        """
        Apply damage to the unit.

        Args:
            damage: Amount of damage to take

        Returns:
            True if unit is still alive, False if dead
        """
        self.health -= damage
        if self.health <= 0:
            self.health = 0
            self.deceased = True
            return False
        return True

    def heal(self, amount: int) -> int:
        """Restore health up to the maximum and return the amount actually healed."""
        if not self.is_alive():
            return 0
        old_health = self.health
        self.health = min(self.max_health, self.health + amount)
        return self.health - old_health

    def kill(self) -> None:
        """Lock health at zero and mark the unit deceased."""
        self.health = 0
        self.deceased = True

    def move_to(self, row: int, col: int) -> None:
        """Move the unit to a new position."""
        self.row = row
        self.col = col

    def to_dict(self):
        """Convert unit to dictionary for serialization."""
        return {
            'id': self.id,
            'archetype': self.archetype.value,
            'team': self.team.value,
            'row': self.row,
            'col': self.col,
            'health': self.health,
            'max_health': self.max_health,
            'attack': self.attack,
            'cooldown': self.cooldown,
            'max_cooldown': self.max_cooldown,
            'frozen_ticks': self.frozen_ticks,
            'deceased': self.deceased,
            'stuck_ticks': self.stuck_ticks,
            'activation_turn': self.activation_turn,
            'bonded_tank_id': self.bonded_tank_id,
            'last_target_id': self.last_target_id,
        }

    @classmethod
    def from_dict(cls, data):
        """Create unit from dictionary."""
        unit = cls(
            data['id'],
            Archetype.from_code(data['archetype']),
            Team(data['team']),
            data['row'],
            data['col'],
        )
        unit.max_health = data.get('max_health', unit.max_health)
        unit.health = data['health']
        unit.attack = data.get('attack', unit.attack)
        unit.cooldown = data.get('cooldown', 0)
        unit.max_cooldown = data.get('max_cooldown', unit.max_cooldown)
        unit.frozen_ticks = data.get('frozen_ticks', 0)
        unit.deceased = data.get('deceased', False)
        unit.stuck_ticks = data.get('stuck_ticks', 0)
        unit.activation_turn = data.get('activation_turn', 0)
        unit.bonded_tank_id = data.get('bonded_tank_id')
        unit.last_target_id = data.get('last_target_id')
        return unit

    def __repr__(self) -> str:
        return (f"Unit({self.id}, {self.archetype.value}, {self.team.value}, "
                f"({self.row}, {self.col}), {self.health}/{self.max_health})")
