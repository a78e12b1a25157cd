"""
Headless balance analysis.

Runs seeded battles between team compositions without the match flow and
summarizes win rates as pandas tables. Units are dropped on random free
cells of their home rows, the same for every archetype, so only the rules
decide the outcome.
"""
import logging
import random
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from battlegrid.constants import ALL_ARCHETYPES, HOME_ROWS, Archetype, Team
from battlegrid.core.battle_state import BattleState, activation_turn_for
from battlegrid.core.grid import TileGrid
from battlegrid.core.unit import Unit
from battlegrid.game.bonding import set_bonds
from battlegrid.game.bot import PlacementBot
from battlegrid.game.engine import DRAW, BattleEngine
from battlegrid.utils.settings import MatchSettings

logger = logging.getLogger(__name__)

COLOR_TEAMS: Dict[str, List[Archetype]] = {
    'red': [Archetype.WARRIOR, Archetype.WARRIOR, Archetype.ASSASSIN, Archetype.ASSASSIN,
            Archetype.DRAGON],
    'green': [Archetype.TANK, Archetype.TANK, Archetype.MAGE, Archetype.MAGE,
              Archetype.HEALER],
    'blue': [Archetype.RIDER, Archetype.RIDER, Archetype.ARCHER, Archetype.ARCHER,
             Archetype.FROST],
}

# Baseline used when stats are equalized to isolate the counter system
EQUAL_HEALTH = 100
EQUAL_ATTACK = 20
EQUAL_COOLDOWN = 2


@dataclass
class BattleResult:
    """
    Outcome of one simulated battle.

    Attributes:
        winner: 'player', 'enemy' or 'draw'
        ticks: Ticks played
        timed_out: Whether the battle timer decided the result
        player_survivors: Living player units at the end
        enemy_survivors: Living enemy units at the end
    """

    winner: str
    ticks: int
    timed_out: bool
    player_survivors: int
    enemy_survivors: int


def _deploy(battle: BattleState, team: Team, archetypes: Sequence[Archetype],
            rng: random.Random, equalize_stats: bool) -> None:
    cells = [
        (row, col) for row in HOME_ROWS[team] for col in range(battle.grid.size)
        if battle.grid.get_cell(row, col).is_walkable() and battle.grid.get_cell(row, col).is_free()
    ]
    rng.shuffle(cells)
    for index, (archetype, (row, col)) in enumerate(zip(archetypes, cells)):
        unit = Unit(f"{team.value[0]}{index + 1}", archetype, team, row, col)
        if equalize_stats:
            unit.max_health = unit.health = EQUAL_HEALTH
            unit.attack = EQUAL_ATTACK
            unit.max_cooldown = EQUAL_COOLDOWN
        battle.add_unit(unit)


def simulate_battle(player_team: Sequence[Archetype], enemy_team: Sequence[Archetype],
                    rng: random.Random, settings: Optional[MatchSettings] = None,
                    equalize_stats: bool = False) -> BattleResult:
    """
    Run one battle to completion.

    Args:
        player_team: Archetypes fielded by the player side
        enemy_team: Archetypes fielded by the enemy side
        rng: Seeded random generator driving terrain, deployment and combat
        settings: Rule settings (bonds, variance, timer)
        equalize_stats: Give every unit the same health, attack and cooldown

    Returns:
        BattleResult
    """
    settings = settings or MatchSettings()
    battle = BattleState(TileGrid.generate(rng))
    _deploy(battle, Team.PLAYER, player_team, rng, equalize_stats)
    _deploy(battle, Team.ENEMY, enemy_team, rng, equalize_stats)

    units = list(battle.units.values())
    if settings.use_bonds:
        set_bonds(units)
    for unit in units:
        unit.activation_turn = activation_turn_for(unit.team, unit.row)

    engine = BattleEngine(rng, settings)
    outcome = engine.outcome(battle)
    timed_out = False
    while outcome is None:
        outcome = engine.tick(battle)
        if outcome is None and battle.tick >= settings.max_battle_ticks:
            outcome = engine.timeout_outcome(battle)
            timed_out = True

    counts = battle.alive_counts()
    return BattleResult(
        winner=outcome,
        ticks=battle.tick,
        timed_out=timed_out,
        player_survivors=counts[Team.PLAYER],
        enemy_survivors=counts[Team.ENEMY],
    )


def run_battles(player_team: Sequence[Archetype], enemy_team: Sequence[Archetype],
                battles: int = 100, seed: int = 0, settings: Optional[MatchSettings] = None,
                equalize_stats: bool = False) -> pd.DataFrame:
    """Simulate a batch of battles, one row per battle."""
    rng = random.Random(seed)
    rows = [
        asdict(simulate_battle(player_team, enemy_team, rng, settings, equalize_stats))
        for _ in range(battles)
    ]
    return pd.DataFrame(rows, columns=['winner', 'ticks', 'timed_out',
                                       'player_survivors', 'enemy_survivors'])


def win_rate(results: pd.DataFrame, team: Team = Team.PLAYER) -> float:
    """Share of battles won by ``team``."""
    if results.empty:
        return 0.0
    return float((results['winner'] == team.value).mean())


def summarize(results: pd.DataFrame) -> pd.Series:
    """Win, loss and draw shares plus average battle length."""
    return pd.Series({
        'player_win_rate': win_rate(results, Team.PLAYER),
        'enemy_win_rate': win_rate(results, Team.ENEMY),
        'draw_rate': float((results['winner'] == DRAW).mean()) if not results.empty else 0.0,
        'timeout_rate': float(results['timed_out'].mean()) if not results.empty else 0.0,
        'mean_ticks': float(results['ticks'].mean()) if not results.empty else 0.0,
    })


def mono_matrix(battles: int = 20, seed: int = 0, team_size: int = 5,
                settings: Optional[MatchSettings] = None) -> pd.DataFrame:
    """
    Win rate of every mono-archetype team against every other.

    Returns:
        DataFrame indexed by the player archetype, columns the enemy archetype
    """
    names = [a.value for a in ALL_ARCHETYPES]
    matrix = pd.DataFrame(0.0, index=names, columns=names)
    for i, mine in enumerate(ALL_ARCHETYPES):
        for j, theirs in enumerate(ALL_ARCHETYPES):
            results = run_battles([mine] * team_size, [theirs] * team_size, battles,
                                  seed + i * len(names) + j, settings)
            matrix.loc[mine.value, theirs.value] = win_rate(results)
    logger.info(f"Mono matrix computed over {battles} battles per pairing")
    return matrix


def color_matchups(battles: int = 100, seed: int = 0,
                   settings: Optional[MatchSettings] = None,
                   equalize_stats: bool = False) -> pd.DataFrame:
    """Summaries of every pure color team against every other, one row per pairing."""
    rows = []
    for mine, my_team in COLOR_TEAMS.items():
        for theirs, their_team in COLOR_TEAMS.items():
            if mine == theirs:
                continue
            results = run_battles(my_team, their_team, battles, seed, settings, equalize_stats)
            summary = summarize(results)
            summary['player'] = mine
            summary['enemy'] = theirs
            rows.append(summary)
    return pd.DataFrame(rows).set_index(['player', 'enemy'])


def difficulty_scaling(player_team: Sequence[Archetype], battles: int = 50, seed: int = 0,
                       settings: Optional[MatchSettings] = None) -> pd.DataFrame:
    """
    Player win rate against the placement bot at each difficulty.

    The bot sees the player's composition and picks its own; deployment is
    random for both sides.
    """
    rows = []
    for difficulty in range(1, 6):
        rng = random.Random(seed + difficulty)
        bot = PlacementBot(difficulty, rng)
        wins = 0
        for _ in range(battles):
            picks = bot.generate(player_team, len(player_team), TileGrid.generate(rng))
            result = simulate_battle(player_team, [p.archetype for p in picks], rng, settings)
            wins += result.winner == Team.PLAYER.value
        rows.append({'difficulty': difficulty, 'player_win_rate': wins / battles})
    return pd.DataFrame(rows).set_index('difficulty')
