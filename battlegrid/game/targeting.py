"""
Target selection for units.

Rules are evaluated in order and the first one that yields a target wins:
tank taunt, lock-on, opportunist, switch-avoidance, column bias,
frontline-for-melee, nearest enemy.
"""
from __future__ import annotations
import random
from typing import TYPE_CHECKING, List, Optional

from battlegrid.constants import (
    ADVANCE_DIRECTION, COLUMN_BIAS_CHANCE, LOCK_ON_ARCHETYPES, OPPORTUNIST_ARCHETYPES,
    OPPORTUNIST_HP_RATIO, SWITCH_AVOIDING_ARCHETYPES, TAUNT_CHANCE, TAUNT_RADIUS, Archetype
)
from battlegrid.game.movement import manhattan

if TYPE_CHECKING:
    from battlegrid.core.battle_state import BattleState
    from battlegrid.core.unit import Unit


def nearest(unit: 'Unit', candidates: List['Unit']) -> 'Unit':
    """Closest candidate by Manhattan distance, earliest in arena order on ties."""
    return min(candidates, key=lambda e: manhattan(unit.position, e.position))


def find_target(unit: 'Unit', battle: 'BattleState', rng: random.Random) -> Optional['Unit']:
    """
    Choose the enemy a unit goes after this tick.

    Args:
        unit: The acting unit
        battle: Current battle
        rng: Seeded random generator for the probabilistic rules

    Returns:
        Target unit, or None when no enemy is alive
    """
    enemies = battle.living_units(unit.team.opponent)
    if not enemies:
        return None

    # Tank taunt
    tanks = [
        e for e in enemies
        if e.archetype is Archetype.TANK and manhattan(unit.position, e.position) <= TAUNT_RADIUS
    ]
    if tanks and rng.random() < TAUNT_CHANCE:
        return nearest(unit, tanks)

    # Lock-on: keep hitting the previous victim
    if unit.archetype in LOCK_ON_ARCHETYPES and unit.last_target_id is not None:
        previous = battle.get_unit(unit.last_target_id)
        if previous is not None and previous.is_alive():
            return previous

    # Opportunist: finish off the most wounded
    if unit.archetype in OPPORTUNIST_ARCHETYPES:
        wounded = [e for e in enemies if e.hp_ratio() < OPPORTUNIST_HP_RATIO]
        if wounded:
            return min(wounded, key=lambda e: (e.hp_ratio(), manhattan(unit.position, e.position)))

    candidates = enemies
    if unit.archetype in SWITCH_AVOIDING_ARCHETYPES and len(enemies) > 1:
        others = [e for e in enemies if e.id != unit.last_target_id]
        if others:
            candidates = others

    # Column bias
    if rng.random() < COLUMN_BIAS_CHANCE:
        lane = [e for e in candidates if abs(e.col - unit.col) <= 1]
        if lane:
            return min(lane, key=lambda e: (abs(e.col - unit.col),
                                            manhattan(unit.position, e.position)))

    # Frontline for melee: the enemy that advanced furthest toward us
    if unit.is_melee:
        toward_us = -ADVANCE_DIRECTION[unit.team]
        return max(candidates, key=lambda e: (e.row * toward_us,
                                              -manhattan(unit.position, e.position)))

    return nearest(unit, candidates)


def find_heal_target(healer: 'Unit', battle: 'BattleState') -> Optional['Unit']:
    """Get the first damaged living ally the healer can reach from where it stands."""
    for ally in damaged_allies(healer, battle):
        if healer.can_attack(ally):
            return ally
    return None


def damaged_allies(healer: 'Unit', battle: 'BattleState') -> List['Unit']:
    return [
        u for u in battle.living_units(healer.team)
        if u.id != healer.id and u.health < u.max_health
    ]
