"""
Opponent placement generator for computer-controlled teams.
"""
import logging
import random
from collections import Counter
from typing import Iterable, List, NamedTuple, Optional, Set, Tuple

from battlegrid.constants import (
    ALL_ADJACENT, ALL_ARCHETYPES, ARCHETYPE_DATA, BOND_RELOCATE_CHANCE, COLOR_FOCUS_CHANCE,
    COUNTER_PICK_CHANCE, FORCE_TANK_CHANCE, HOME_ROWS, PLACEMENT_RETRIES, POSITIONAL_AWARENESS,
    RANGED_ARCHETYPES, Archetype, ColorGroup, Team, archetypes_of_color, hard_counter_color
)
from battlegrid.core.grid import TileGrid

logger = logging.getLogger(__name__)


class Placement(NamedTuple):
    archetype: Archetype
    row: int
    col: int


class PlacementBot:
    """Builds a team composition and positions for the computer opponent."""

    def __init__(self, difficulty: int, rng: random.Random, team: Team = Team.ENEMY):
        """
        Initialize the placement bot.

        Args:
            difficulty: 1-5, scales counter-picking and positioning
            rng: Seeded random generator
            team: Team the bot places for
        """
        if not 1 <= difficulty <= 5:
            raise ValueError(f"Difficulty must be between 1 and 5, got {difficulty}")
        self.difficulty = difficulty
        self.rng = rng
        self.team = team

    @property
    def counter_pick_chance(self) -> float:
        return COUNTER_PICK_CHANCE[self.difficulty - 1]

    @property
    def positional_awareness(self) -> float:
        return POSITIONAL_AWARENESS[self.difficulty - 1]

    @property
    def bond_relocate_chance(self) -> float:
        return BOND_RELOCATE_CHANCE[self.difficulty - 1]

    def generate(self, observed: Iterable[Archetype], quota: int, grid: TileGrid,
                 banned: Iterable[Archetype] = (),
                 occupied: Optional[Set[Tuple[int, int]]] = None) -> List[Placement]:
        """
        Generate the opponent's placements.

        Args:
            observed: Archetypes of the opposing team (empty when placing blind)
            quota: Number of units to place
            grid: Terrain of the current round
            banned: Fatigued archetypes that may not be picked
            occupied: Cells already taken

        Returns:
            List of placements; units that found no cell after the retries are dropped
        """
        observed = list(observed)
        picks = self.pick_archetypes(observed, quota, set(banned))
        taken = set(occupied or ())

        placements = []
        for archetype in picks:
            cell = self._find_cell(archetype, grid, taken)
            if cell is None:
                logger.debug(f"No cell for {archetype.value} after {PLACEMENT_RETRIES} tries")
                continue
            taken.add(cell)
            placements.append(Placement(archetype, *cell))

        placements = self._relocate_near_tanks(placements, grid, taken)
        logger.debug(f"Generated {len(placements)} placements at difficulty {self.difficulty}")
        return placements

    def pick_archetypes(self, observed: List[Archetype], quota: int,
                        banned: Set[Archetype]) -> List[Archetype]:
        """Choose the composition, counter-picking the observed team."""
        available = [a for a in ALL_ARCHETYPES if a not in banned] or list(ALL_ARCHETYPES)

        # Archetypes strong against each observed unit, weighted by how often it appears
        counters = [
            a for seen in observed for a in available
            if seen in ARCHETYPE_DATA[a]['strong_vs']
        ]

        focus: List[Archetype] = []
        picks: List[Archetype] = []
        if self.difficulty >= 5:
            if observed:
                dominant = self.dominant_color(observed)
                focus = [a for a in archetypes_of_color(hard_counter_color(dominant))
                         if a in available]
            if (Archetype.TANK in available and quota > 0
                    and self.rng.random() < FORCE_TANK_CHANCE):
                picks.append(Archetype.TANK)

        while len(picks) < quota:
            if focus and self.rng.random() < COLOR_FOCUS_CHANCE:
                picks.append(self.rng.choice(focus))
            elif counters and self.rng.random() < self.counter_pick_chance:
                picks.append(self.rng.choice(counters))
            else:
                picks.append(self.rng.choice(available))
        return picks

    @staticmethod
    def dominant_color(observed: List[Archetype]) -> ColorGroup:
        """Most common color among the observed archetypes, catalog order on ties."""
        counts = Counter(ARCHETYPE_DATA[a]['color'] for a in observed)
        return max(ColorGroup, key=lambda c: counts[c])

    def preferred_rows(self, archetype: Archetype) -> List[int]:
        """Home rows an aware bot uses: ranged at the back, tanks up front."""
        rows = sorted(HOME_ROWS[self.team], key=self._depth)
        if archetype is Archetype.TANK:
            return rows[:1]
        if archetype in RANGED_ARCHETYPES:
            return rows[-1:]
        return rows[:2]

    def _depth(self, row: int) -> int:
        home = HOME_ROWS[self.team]
        front = min(home) if self.team is Team.PLAYER else max(home)
        return abs(row - front)

    def _find_cell(self, archetype: Archetype, grid: TileGrid,
                   taken: Set[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
        rows = [r for r in HOME_ROWS[self.team] if r < grid.size]
        aware = self.rng.random() < self.positional_awareness
        for _ in range(PLACEMENT_RETRIES):
            row = self.rng.choice(self.preferred_rows(archetype) if aware else rows)
            col = self.rng.randrange(grid.size)
            if self._usable(grid, row, col, taken):
                return row, col
        return None

    @staticmethod
    def _usable(grid: TileGrid, row: int, col: int, taken: Set[Tuple[int, int]]) -> bool:
        cell = grid.get_cell(row, col)
        return (cell is not None and (row, col) not in taken and cell.is_free()
                and cell.is_walkable())

    def _relocate_near_tanks(self, placements: List[Placement], grid: TileGrid,
                             taken: Set[Tuple[int, int]]) -> List[Placement]:
        """Probabilistically move non-tank picks next to a tank to seed bonding."""
        tanks = [p for p in placements if p.archetype is Archetype.TANK]
        if not tanks:
            return placements

        home = set(HOME_ROWS[self.team])
        result = []
        for placement in placements:
            if placement.archetype is Archetype.TANK:
                result.append(placement)
                continue
            beside_tank = any(
                max(abs(placement.row - t.row), abs(placement.col - t.col)) == 1 for t in tanks
            )
            if beside_tank or self.rng.random() >= self.bond_relocate_chance:
                result.append(placement)
                continue
            tank = self.rng.choice(tanks)
            spots = [
                (tank.row + dr, tank.col + dc) for dr, dc in ALL_ADJACENT
                if tank.row + dr in home
                and self._usable(grid, tank.row + dr, tank.col + dc, taken)
            ]
            if not spots:
                result.append(placement)
                continue
            spot = self.rng.choice(spots)
            taken.discard((placement.row, placement.col))
            taken.add(spot)
            result.append(Placement(placement.archetype, *spot))
        return result
