"""
Per-battle ability state for one team.

Every ability moves through ``unused -> active -> [secondary] -> expired`` at most
once per battle. Timers advance at the start of each tick, so an ability with an
N-tick phase affects exactly N ticks.
"""
from typing import Dict

from battlegrid.constants import (
    MORALE_BUFF_MULTIPLIER, MORALE_DEBUFF_MULTIPLIER, MORALE_DEBUFF_TICKS,
    SHIELD_WALL_DEFENCE_MULTIPLIER, Ability, AbilityPhase
)


class AbilityStatus:
    """Lifecycle of one ability for one team."""

    def __init__(self) -> None:
        self.used = False
        self.phase = AbilityPhase.UNUSED
        self.ticks_remaining = 0

    @property
    def is_running(self) -> bool:
        return self.phase in (AbilityPhase.ACTIVE, AbilityPhase.SECONDARY)

    def to_dict(self):
        return {
            'used': self.used,
            'phase': self.phase.value,
            'ticks_remaining': self.ticks_remaining,
        }

    @classmethod
    def from_dict(cls, data):
        status = cls()
        status.used = data['used']
        status.phase = AbilityPhase(data['phase'])
        status.ticks_remaining = data['ticks_remaining']
        return status


class TeamAbilities:
    """All four abilities of one team for the current battle."""

    def __init__(self) -> None:
        self.statuses: Dict[Ability, AbilityStatus] = {a: AbilityStatus() for a in Ability}

    def __getitem__(self, ability: Ability) -> AbilityStatus:
        return self.statuses[ability]

    def is_used(self, ability: Ability) -> bool:
        return self.statuses[ability].used

    def morale_phase(self) -> AbilityPhase:
        return self.statuses[Ability.MORALE_BOOST].phase

    def focus_fire_active(self) -> bool:
        return self.statuses[Ability.FOCUS_FIRE].phase is AbilityPhase.ACTIVE

    def shield_wall_active(self) -> bool:
        return self.statuses[Ability.SHIELD_WALL].phase is AbilityPhase.ACTIVE

    def damage_dealt_multiplier(self) -> float:
        """Multiplier on damage this team deals (morale and shield wall)."""
        if self.shield_wall_active():
            return 0.0
        phase = self.morale_phase()
        if phase is AbilityPhase.ACTIVE:
            return MORALE_BUFF_MULTIPLIER
        if phase is AbilityPhase.SECONDARY:
            return MORALE_DEBUFF_MULTIPLIER
        return 1.0

    def damage_taken_multiplier(self) -> float:
        """Multiplier on damage this team receives."""
        return SHIELD_WALL_DEFENCE_MULTIPLIER if self.shield_wall_active() else 1.0

    def advance(self) -> None:
        """Advance every running ability timer by one tick."""
        for ability, status in self.statuses.items():
            if not status.is_running:
                continue
            if status.ticks_remaining <= 0:
                if ability is Ability.MORALE_BOOST and status.phase is AbilityPhase.ACTIVE:
                    status.phase = AbilityPhase.SECONDARY
                    status.ticks_remaining = MORALE_DEBUFF_TICKS
                else:
                    status.phase = AbilityPhase.EXPIRED
                    status.ticks_remaining = 0
                    continue
            status.ticks_remaining -= 1

    def to_dict(self):
        return {ability.value: status.to_dict() for ability, status in self.statuses.items()}

    @classmethod
    def from_dict(cls, data):
        abilities = cls()
        for code, status_data in data.items():
            abilities.statuses[Ability(code)] = AbilityStatus.from_dict(status_data)
        return abilities

