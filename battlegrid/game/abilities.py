"""
Team abilities: activation rules and the opponent's trigger logic.
"""
from __future__ import annotations
import logging
import random
from typing import TYPE_CHECKING, List, Optional

from battlegrid.constants import (
    AI_FOCUS_FIRE_TICKS, FOCUS_FIRE_TICKS, MORALE_BUFF_TICKS, SACRIFICE_HEAL_RATIO,
    SHIELD_WALL_RETREAT_STEPS, SHIELD_WALL_TICKS, HOME_ROWS, Ability, AbilityPhase, Team
)
from battlegrid.core import events as ev

if TYPE_CHECKING:
    from battlegrid.core.battle_state import BattleState
    from battlegrid.core.unit import Unit

logger = logging.getLogger(__name__)


def activate(battle: 'BattleState', team: Team, ability: Ability,
             duration: Optional[int] = None) -> bool:
    """
    Activate a team ability.

    Args:
        battle: Battle the ability acts on
        team: Activating team
        ability: Ability to activate
        duration: Override for the active phase length (focus fire only)

    Returns:
        True if activated, False if rejected (already used or not applicable)
    """
    status = battle.abilities[team][ability]
    if status.used:
        logger.debug(f"{team.value} already used {ability.value}")
        return False

    if ability is Ability.SACRIFICE:
        return _sacrifice(battle, team)

    status.used = True
    status.phase = AbilityPhase.ACTIVE
    if ability is Ability.MORALE_BOOST:
        status.ticks_remaining = MORALE_BUFF_TICKS
    elif ability is Ability.FOCUS_FIRE:
        status.ticks_remaining = duration if duration is not None else FOCUS_FIRE_TICKS
    elif ability is Ability.SHIELD_WALL:
        status.ticks_remaining = SHIELD_WALL_TICKS

    logger.info(f"{team.value} activated {ability.value} at tick {battle.tick}")
    return True


def _sacrifice(battle: 'BattleState', team: Team) -> bool:
    """Kill the team's weakest unit and heal the rest by a share of their max health."""
    living = battle.living_units(team)
    if len(living) < 2:
        logger.debug(f"{team.value} cannot sacrifice with {len(living)} living units")
        return False

    weakest = min(living, key=lambda u: u.health)
    status = battle.abilities[team][Ability.SACRIFICE]
    status.used = True
    status.phase = AbilityPhase.EXPIRED

    battle.emit(ev.BattleEvent(
        type=ev.KILL, tick=battle.tick, attacker_id=weakest.id, attacker_pos=weakest.position,
        icon='skull', target_id=weakest.id, target_pos=weakest.position,
        damage=weakest.health, source=Ability.SACRIFICE.value,
    ))
    weakest.kill()
    battle.remove_unit_from_grid(weakest)

    for unit in living:
        if unit is weakest:
            continue
        healed = unit.heal(round(unit.max_health * SACRIFICE_HEAL_RATIO))
        if healed:
            battle.emit(ev.BattleEvent(
                type=ev.HEAL, tick=battle.tick, attacker_id=weakest.id,
                attacker_pos=weakest.position, icon='skull', target_id=unit.id,
                target_pos=unit.position, heal_amount=healed, source=Ability.SACRIFICE.value,
            ))

    logger.info(f"{team.value} sacrificed {weakest.id} at tick {battle.tick}")
    return True


def focus_target(battle: 'BattleState', team: Team, rule: str = 'lowest_hp') -> Optional['Unit']:
    """Pick the enemy every unit of ``team`` attacks while focus fire is active."""
    enemies = battle.living_units(team.opponent)
    if not enemies:
        return None
    if rule == 'highest_hp':
        return max(enemies, key=lambda u: u.health)
    return min(enemies, key=lambda u: u.health)


def shield_wall_retreat(battle: 'BattleState', team: Team) -> List['Unit']:
    """
    Pull every living unit of ``team`` back toward its home rows.

    Each unit outside its home rows tries to step back two rows, then one,
    along its own column. Blocked retreats leave the unit in place.

    Returns:
        Units that moved
    """
    home = HOME_ROWS[team]
    back = 1 if team is Team.PLAYER else -1
    moved = []
    for unit in battle.living_units(team):
        if unit.row in home:
            continue
        for step in range(SHIELD_WALL_RETREAT_STEPS, 0, -1):
            row = unit.row + back * step
            cell = battle.grid.get_cell(row, unit.col)
            if cell is None or not cell.is_free() or not cell.is_walkable(unit.flying):
                continue
            battle.move_unit(unit, row, unit.col)
            moved.append(unit)
            break
    return moved


class AbilityBot:
    """Decides when the computer opponent fires its abilities."""

    MORALE_CHANCE = {3: 0.15, 4: 0.3, 5: 0.5}
    FOCUS_CHANCE = {3: 0.2, 4: 0.4, 5: 0.6}
    SACRIFICE_CHANCE = {3: 0.25, 4: 0.4, 5: 0.6}
    SHIELD_WALL_CHANCE = {4: 0.3, 5: 0.5}

    def __init__(self, difficulty: int, rng: random.Random, team: Team = Team.ENEMY):
        """
        Initialize the ability bot.

        Args:
            difficulty: 1-5; abilities are only used from difficulty 3
            rng: Seeded random generator
            team: Team the bot plays
        """
        self.difficulty = difficulty
        self.rng = rng
        self.team = team

    def take_turn(self, battle: 'BattleState') -> List[Ability]:
        """Evaluate every unused ability once and fire those whose trigger holds."""
        if self.difficulty < 3:
            return []

        fired = []
        own = battle.living_units(self.team)
        other = battle.living_units(self.team.opponent)
        abilities = battle.abilities[self.team]
        tick = battle.tick
        hard = self.difficulty >= 5

        if not abilities.is_used(Ability.MORALE_BOOST) and tick >= (2 if hard else 3):
            chance = self.MORALE_CHANCE[self.difficulty]
            if (len(own) < len(other)
                    or (tick >= 5 and self.rng.random() < chance)
                    or (tick >= 8 and self.rng.random() < chance * 2)):
                if activate(battle, self.team, Ability.MORALE_BOOST):
                    fired.append(Ability.MORALE_BOOST)

        if not abilities.is_used(Ability.FOCUS_FIRE) and tick >= (3 if hard else 4):
            chance = self.FOCUS_CHANCE[self.difficulty]
            healthy = any(u.hp_ratio() > 0.7 for u in other)
            if ((healthy and self.rng.random() < chance)
                    or (tick >= 7 and self.rng.random() < chance * 0.5)):
                if activate(battle, self.team, Ability.FOCUS_FIRE, duration=AI_FOCUS_FIRE_TICKS):
                    fired.append(Ability.FOCUS_FIRE)

        if (not abilities.is_used(Ability.SACRIFICE) and len(own) >= 2
                and tick >= (4 if hard else 5)):
            chance = self.SACRIFICE_CHANCE[self.difficulty]
            avg_ratio = sum(u.hp_ratio() for u in own) / len(own)
            if ((avg_ratio < 0.5 and self.rng.random() < chance)
                    or (len(own) <= 2 and self.rng.random() < chance * 0.6)):
                if activate(battle, self.team, Ability.SACRIFICE):
                    fired.append(Ability.SACRIFICE)

        own = battle.living_units(self.team)
        if (self.difficulty >= 4 and own and not abilities.is_used(Ability.SHIELD_WALL)
                and len(other) - len(own) >= 2):
            avg_ratio = sum(u.hp_ratio() for u in own) / len(own)
            if avg_ratio < 0.4 and self.rng.random() < self.SHIELD_WALL_CHANCE[self.difficulty]:
                if activate(battle, self.team, Ability.SHIELD_WALL):
                    fired.append(Ability.SHIELD_WALL)

        return fired
