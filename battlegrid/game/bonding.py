"""
Tank bonding: loose formation keeping between tanks and nearby allies.

Units placed next to a friendly tank are bonded to it. Bonded units drift back
toward their tank when they stray, and prefer to fight from beside it.
Unbonded units near a tank feel a weaker pull.
"""
from __future__ import annotations
import logging
import random
from typing import TYPE_CHECKING, Iterable, Optional

from battlegrid.constants import (
    BOND_PULL_CHANCE, BOND_PULL_DISTANCE, SOFT_PULL_CHANCE, SOFT_PULL_RADIUS, Archetype
)
from battlegrid.game.movement import Position, chebyshev, legal_moves, manhattan

if TYPE_CHECKING:
    from battlegrid.core.battle_state import BattleState
    from battlegrid.core.unit import Unit

logger = logging.getLogger(__name__)


def set_bonds(units: Iterable['Unit']) -> int:
    """
    Bond every non-tank unit to an adjacent same-team tank.

    Adjacency is the 8-neighbourhood. When several tanks qualify the first in
    the given order wins.

    Returns:
        Number of bonds created
    """
    units = list(units)
    tanks = [u for u in units if u.archetype is Archetype.TANK and u.is_alive()]
    bonds = 0
    for unit in units:
        unit.bonded_tank_id = None
        if unit.archetype is Archetype.TANK:
            continue
        for tank in tanks:
            if tank.team is unit.team and chebyshev(unit.position, tank.position) == 1:
                unit.bonded_tank_id = tank.id
                bonds += 1
                break
    logger.debug(f"Created {bonds} tank bonds")
    return bonds


def takes_formation(unit: 'Unit') -> bool:
    return unit.archetype not in (Archetype.TANK, Archetype.HEALER)


def formation_move(unit: 'Unit', target: 'Unit', battle: 'BattleState',
                   rng: random.Random) -> Optional[Position]:
    """
    Resolve a formation-driven move before ordinary pathing.

    Args:
        unit: The acting unit
        target: Its current target
        battle: Current battle
        rng: Seeded random generator for the pull rolls

    Returns:
        Destination chosen by the formation rules, or None to fall through
    """
    if not takes_formation(unit):
        return None

    tank = battle.get_unit(unit.bonded_tank_id)
    if tank is not None and tank.is_alive():
        return _bonded_move(unit, tank, target, battle, rng)

    friendly_tanks = [
        t for t in battle.living_units(unit.team)
        if t.archetype is Archetype.TANK
        and chebyshev(unit.position, t.position) <= SOFT_PULL_RADIUS
    ]
    if not friendly_tanks or unit.can_attack(target):
        return None
    tank = min(friendly_tanks, key=lambda t: chebyshev(unit.position, t.position))
    if chebyshev(unit.position, tank.position) <= 1 or rng.random() >= SOFT_PULL_CHANCE:
        return None

    here_to_target = manhattan(unit.position, target.position)
    closer = [
        m for m in legal_moves(unit, battle)
        if chebyshev(m, tank.position) < chebyshev(unit.position, tank.position)
        and manhattan(m, target.position) <= here_to_target
    ]
    if not closer:
        return None
    return min(closer, key=lambda m: (chebyshev(m, tank.position), manhattan(m, target.position)))


def _bonded_move(unit: 'Unit', tank: 'Unit', target: 'Unit', battle: 'BattleState',
                 rng: random.Random) -> Optional[Position]:
    distance = chebyshev(unit.position, tank.position)

    if distance > BOND_PULL_DISTANCE:
        if rng.random() >= BOND_PULL_CHANCE:
            return None
        closer = [
            m for m in legal_moves(unit, battle)
            if chebyshev(m, tank.position) < distance
        ]
        if not closer:
            return None
        return min(closer, key=lambda m: (
            not unit.can_attack_from(m[0], m[1], target.row, target.col),
            chebyshev(m, tank.position),
        ))

    if distance <= 1:
        if unit.can_attack(target):
            return unit.position
        beside = [
            m for m in legal_moves(unit, battle)
            if chebyshev(m, tank.position) <= 1
            and unit.can_attack_from(m[0], m[1], target.row, target.col)
        ]
        if beside:
            return min(beside, key=lambda m: manhattan(m, target.position))

    return None
