"""
Movement rules and the "move toward target" resolver.
"""
from __future__ import annotations
import logging
from collections import deque
from typing import TYPE_CHECKING, List, Optional, Tuple

from battlegrid.constants import ALL_ADJACENT, BFS_NODE_LIMIT, STUCK_THRESHOLD

if TYPE_CHECKING:
    from battlegrid.core.battle_state import BattleState
    from battlegrid.core.unit import Unit

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def chebyshev(a: Position, b: Position) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def can_stand_on(unit: 'Unit', row: int, col: int, battle: 'BattleState') -> bool:
    """
    Check if a unit may end a move on a cell.

    Args:
        unit: The moving unit (its own cell counts as free)
        row: Grid row
        col: Grid column
        battle: Battle the unit belongs to

    Returns:
        True if the cell is on the grid, unoccupied and passable for the unit
    """
    cell = battle.grid.get_cell(row, col)
    if cell is None:
        return False
    if not cell.is_walkable(unit.flying):
        return False
    return cell.is_free(ignore_id=unit.id)


def legal_moves(unit: 'Unit', battle: 'BattleState') -> List[Position]:
    """Get every destination the unit's movement pattern allows this tick."""
    moves = []
    for dr, dc in unit.data['move_pattern']:
        row, col = unit.row + dr, unit.col + dc
        if can_stand_on(unit, row, col, battle):
            moves.append((row, col))
    return moves


def attack_origins(unit: 'Unit', target: 'Unit', battle: 'BattleState') -> List[Position]:
    """Get every cell the unit could stand on to hit the target."""
    origins = []
    for dr, dc in unit.data['attack_pattern']:
        row, col = target.row - dr, target.col - dc
        if can_stand_on(unit, row, col, battle):
            origins.append((row, col))
    return origins


def is_bonus_cell(battle: 'BattleState', pos: Position) -> bool:
    return battle.grid.terrain_at(*pos).is_bonus()


def first_step_toward_attack(unit: 'Unit', target: 'Unit', battle: 'BattleState',
                             node_limit: int = BFS_NODE_LIMIT) -> Optional[Position]:
    """
    Breadth-first search for the first step of a shortest path to an attack cell.

    Expands single 8-directional steps from the unit's cell, visiting at most
    ``node_limit`` nodes.

    Returns:
        The first step of the path, or None if no attack cell is found in budget
    """
    start = unit.position
    visited = {start}
    queue = deque([(start, None)])
    expanded = 0

    while queue and expanded < node_limit:
        (row, col), first = queue.popleft()
        expanded += 1

        if first is not None and unit.can_attack_from(row, col, target.row, target.col):
            return first

        for dr, dc in ALL_ADJACENT:
            nxt = (row + dr, col + dc)
            if nxt in visited:
                continue
            if not can_stand_on(unit, nxt[0], nxt[1], battle):
                continue
            visited.add(nxt)
            queue.append((nxt, first if first is not None else nxt))

    return None


def move_toward(unit: 'Unit', target: 'Unit', battle: 'BattleState') -> Position:
    """
    Resolve where a unit moves this tick to engage its target.

    Priority:
    1. Already in range: ranged units step away from an adjacent target while
       keeping it in range (unless stuck), everyone else holds.
    2. A move that allows attacking next tick, preferring forest/hill unless stuck.
    3. When not stuck, a nearby forest/hill that doesn't increase distance.
    4. First step of a bounded BFS toward any attack cell (or a legal move
       closing in on it when the step itself is not in the move pattern).
    5. The move closest to any theoretical attack cell.

    Returns:
        Destination (the unit's own position means hold)
    """
    here = unit.position
    goal = target.position
    stuck = unit.stuck_ticks >= STUCK_THRESHOLD
    moves = legal_moves(unit, battle)

    if unit.can_attack(target):
        if unit.is_ranged and not stuck and chebyshev(here, goal) <= 1:
            kites = [
                m for m in moves
                if unit.can_attack_from(m[0], m[1], goal[0], goal[1])
                and manhattan(m, goal) > manhattan(here, goal)
            ]
            if kites:
                return max(kites, key=lambda m: (manhattan(m, goal), is_bonus_cell(battle, m)))
        return here

    if not moves:
        return here

    attack_ready = [m for m in moves if unit.can_attack_from(m[0], m[1], goal[0], goal[1])]
    if attack_ready:
        if stuck:
            return min(attack_ready, key=lambda m: manhattan(m, goal))
        sign = -1 if unit.is_ranged else 1
        return min(attack_ready,
                   key=lambda m: (not is_bonus_cell(battle, m), sign * manhattan(m, goal)))

    if not stuck and not is_bonus_cell(battle, here):
        cover = [
            m for m in moves
            if is_bonus_cell(battle, m) and manhattan(m, goal) <= manhattan(here, goal)
        ]
        if cover:
            return min(cover, key=lambda m: manhattan(m, goal))

    origins = attack_origins(unit, target, battle) or [goal]

    def origin_distance(pos):
        return min(manhattan(pos, o) for o in origins)

    step = first_step_toward_attack(unit, target, battle)
    if step is not None:
        if step in moves:
            return step
        # Diagonal path steps for units that cannot move diagonally
        toward_step = [m for m in moves if manhattan(m, step) < manhattan(here, step)]
        if toward_step:
            return min(toward_step, key=lambda m: (manhattan(m, step), origin_distance(m)))

    best = min(moves, key=origin_distance)
    if origin_distance(best) < origin_distance(here):
        return best
    logger.debug(f"{unit.id} holds position at {here}")
    return here
