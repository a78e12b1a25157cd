"""
Match phase machine: placement, battle, round resolution and overtime.

A Match owns one BattleState per round and a MatchState that carries over
between rounds. Player actions that are not legal in the current state are
rejected by returning None or False and leave every piece of state untouched.
"""
import logging
import random
from typing import Any, Dict, Optional, Union

from battlegrid.constants import HOME_ROWS, Ability, Archetype, Phase, Team
from battlegrid.core.battle_state import BattleState, activation_turn_for
from battlegrid.core.grid import TileGrid
from battlegrid.core.match_state import MatchState
from battlegrid.core.unit import Unit
from battlegrid.game.abilities import AbilityBot
from battlegrid.game.bonding import set_bonds
from battlegrid.game.bot import PlacementBot
from battlegrid.game.engine import DRAW, BattleEngine
from battlegrid.utils.settings import MatchSettings

logger = logging.getLogger(__name__)

ROUND_OVER_PHASES = (Phase.ROUND_WON, Phase.ROUND_LOST, Phase.ROUND_DRAW)


class Match:
    """A full match between the player and the computer opponent."""

    def __init__(self, settings: Optional[MatchSettings] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None) -> None:
        """
        Create a match and open the first placement phase.

        Args:
            settings: Match settings (defaults used if omitted)
            seed: Seed for a fresh random generator
            rng: Existing random generator; takes precedence over ``seed``
        """
        self.settings = settings or MatchSettings()
        self.rng = rng or random.Random(seed)
        self.state = MatchState()
        self.placement_bot = PlacementBot(self.settings.difficulty, self.rng)
        self.engine = BattleEngine(
            self.rng, self.settings,
            ability_bots=[AbilityBot(self.settings.difficulty, self.rng, Team.ENEMY)],
        )
        self.phase = Phase.PLACE_PLAYER
        self.battle: BattleState = BattleState(TileGrid())
        self.last_outcome: Optional[str] = None
        self._enemy_placed = False
        self.start_round()

    # Placement

    def start_round(self) -> None:
        """Generate terrain and open placement for the current round."""
        self.battle = BattleState(TileGrid.generate(self.rng))
        self.phase = Phase.PLACE_PLAYER
        self.last_outcome = None
        self._enemy_placed = False
        if not self.state.player_places_first:
            # The opponent places first and sees nothing of the player's team
            self._place_enemy(observed=[])
        logger.info(f"Round {self.state.round_number} started "
                    f"({'player' if self.state.player_places_first else 'enemy'} places first)")

    def max_units(self, team: Team = Team.PLAYER) -> int:
        return self.state.max_units(team, self.settings)

    def team_units(self, team: Team):
        return [u for u in self.battle.units.values() if u.team is team]

    def place_unit(self, archetype: Union[Archetype, str], row: int, col: int) -> Optional[Unit]:
        """
        Place a player unit on a home-row cell.

        Args:
            archetype: Archetype or its string code
            row: Target row
            col: Target column

        Returns:
            The placed Unit, or None if the placement was rejected
        """
        if self.phase is not Phase.PLACE_PLAYER:
            logger.debug(f"Cannot place during {self.phase.value}")
            return None
        if not isinstance(archetype, Archetype):
            try:
                archetype = Archetype.from_code(archetype)
            except ValueError:
                logger.debug(f"Unknown archetype {archetype}")
                return None
        if archetype in self.state.banned(Team.PLAYER):
            logger.debug(f"{archetype.value} is fatigued this round")
            return None
        if row not in HOME_ROWS[Team.PLAYER]:
            logger.debug(f"Row {row} is not a player home row")
            return None
        cell = self.battle.grid.get_cell(row, col)
        if cell is None:
            logger.debug(f"({row}, {col}) is out of bounds")
            return None
        if not cell.is_free() or not cell.is_walkable():
            logger.debug(f"({row}, {col}) is occupied or impassable")
            return None
        if len(self.team_units(Team.PLAYER)) >= self.max_units(Team.PLAYER):
            logger.debug(f"Unit quota of {self.max_units(Team.PLAYER)} reached")
            return None

        unit = Unit(self.state.new_unit_id(Team.PLAYER), archetype, Team.PLAYER, row, col)
        self.battle.add_unit(unit)
        return unit

    def remove_unit(self, unit_id: str) -> bool:
        """Take back a placed player unit during placement."""
        unit = self.battle.get_unit(unit_id)
        if self.phase is not Phase.PLACE_PLAYER or unit is None or unit.team is not Team.PLAYER:
            logger.debug(f"Cannot remove {unit_id} during {self.phase.value}")
            return False
        self.battle.remove_unit_from_grid(unit)
        del self.battle.units[unit_id]
        return True

    def _place_enemy(self, observed) -> None:
        occupied = {u.position for u in self.battle.units.values()}
        placements = self.placement_bot.generate(
            observed,
            self.max_units(Team.ENEMY),
            self.battle.grid,
            banned=self.state.banned(Team.ENEMY),
            occupied=occupied,
        )
        for placement in placements:
            unit = Unit(self.state.new_unit_id(Team.ENEMY), placement.archetype, Team.ENEMY,
                        placement.row, placement.col)
            self.battle.add_unit(unit)
        self._enemy_placed = True

    def confirm_placement(self) -> bool:
        """
        Lock in the player's placement.

        With no units placed the round is lost immediately without a battle.
        Otherwise the opponent places (if it has not already), bonds are formed
        and activation turns assigned.

        Returns:
            True if the placement phase ended, False if rejected
        """
        if self.phase is not Phase.PLACE_PLAYER:
            logger.debug(f"Cannot confirm placement during {self.phase.value}")
            return False

        player_units = self.team_units(Team.PLAYER)
        if not player_units:
            logger.info("No units placed, round lost")
            self._resolve_round(Team.ENEMY.value)
            return True

        if not self._enemy_placed:
            self._place_enemy(observed=[u.archetype for u in player_units])

        units = list(self.battle.units.values())
        if self.settings.use_bonds:
            set_bonds(units)
        for unit in units:
            unit.activation_turn = activation_turn_for(unit.team, unit.row)

        self.phase = Phase.PLACE_ENEMY
        return True

    # Battle

    def start_battle(self) -> bool:
        """Enter the battle phase with fresh ability state."""
        if self.phase is not Phase.PLACE_ENEMY:
            logger.debug(f"Cannot start battle during {self.phase.value}")
            return False
        self.battle.tick = 0
        self.phase = Phase.BATTLE
        logger.info(f"Battle started: {len(self.team_units(Team.PLAYER))} vs "
                    f"{len(self.team_units(Team.ENEMY))}")
        return True

    def tick(self) -> Optional[str]:
        """
        Advance the battle by one tick, resolving the round when it ends.

        Returns:
            Round outcome ('player', 'enemy' or 'draw') once decided, else None
        """
        if self.phase is not Phase.BATTLE:
            logger.debug(f"Cannot tick during {self.phase.value}")
            return None
        outcome = self.engine.tick(self.battle)
        if outcome is not None:
            self._resolve_round(outcome)
        elif self.battle.tick >= self.settings.max_battle_ticks:
            outcome = self.expire_timer()
        return outcome

    def run_battle(self) -> Optional[str]:
        """Tick until the round is decided."""
        outcome = None
        while self.phase is Phase.BATTLE:
            outcome = self.tick()
        return outcome

    def expire_timer(self) -> Optional[str]:
        """Resolve the battle by remaining unit counts when the timer runs out."""
        if self.phase is not Phase.BATTLE:
            logger.debug(f"Cannot expire timer during {self.phase.value}")
            return None
        outcome = self.engine.timeout_outcome(self.battle)
        logger.info(f"Battle timer expired at tick {self.battle.tick}")
        self._resolve_round(outcome)
        return outcome

    def activate_ability(self, ability: Union[Ability, str], team: Team = Team.PLAYER) -> bool:
        """Activate a team ability; only possible during battle."""
        if self.phase is not Phase.BATTLE:
            logger.debug(f"Cannot activate abilities during {self.phase.value}")
            return False
        if not isinstance(ability, Ability):
            try:
                ability = Ability(ability)
            except ValueError:
                logger.debug(f"Unknown ability {ability}")
                return False
        return self.engine.activate_ability(self.battle, team, ability)

    def _resolve_round(self, outcome: str) -> None:
        winner = None if outcome == DRAW else Team(outcome)
        self.state.award(winner)
        self.last_outcome = outcome

        over, _, draw = self.state.check_game_over(self.settings)
        if draw:
            self.state.game_draw = True
            self.phase = Phase.GAME_DRAW
        elif winner is None:
            self.phase = Phase.ROUND_DRAW
        elif winner is Team.PLAYER:
            self.phase = Phase.ROUND_WON
        else:
            self.phase = Phase.ROUND_LOST

        scores = self.state.scores
        logger.info(f"Round {self.state.round_number} ended: {outcome} "
                    f"({scores[Team.PLAYER]}:{scores[Team.ENEMY]})"
                    + (" - game over" if over else ""))

    # Between rounds

    @property
    def game_over(self) -> bool:
        return self.state.check_game_over(self.settings)[0]

    @property
    def winner(self) -> Optional[Team]:
        return self.state.check_game_over(self.settings)[1]

    @property
    def in_overtime(self) -> bool:
        return self.state.in_overtime(self.settings)

    def next_round(self) -> bool:
        """
        Close the finished round and open the next one.

        Survivors are fatigued, overtime rounds are counted and a draw offer is
        raised once enough overtime rounds have been played.

        Returns:
            True if the round was closed, False if rejected
        """
        if (self.phase not in ROUND_OVER_PHASES or self.game_over
                or self.state.draw_offer_pending):
            logger.debug(f"Cannot start next round during {self.phase.value}")
            return False

        for team in Team:
            survivors = [u.archetype for u in self.battle.living_units(team)]
            self.state.update_fatigue(team, survivors)

        if self.in_overtime:
            self.state.overtime_count += 1
            if self.state.check_game_over(self.settings)[2]:
                self.state.game_draw = True
                self.phase = Phase.GAME_DRAW
                logger.info("Overtime limit reached, game drawn")
                return True
            if self.state.overtime_count >= self.settings.draw_offer_after:
                self.state.draw_offer_pending = True
                logger.info(f"Draw offered after {self.state.overtime_count} overtime rounds")
                return True

        self._begin_next_round()
        return True

    def accept_draw(self) -> bool:
        if not self.state.draw_offer_pending:
            logger.debug("No draw offer to accept")
            return False
        self.state.draw_offer_pending = False
        self.state.game_draw = True
        self.phase = Phase.GAME_DRAW
        logger.info("Draw accepted")
        return True

    def continue_overtime(self) -> bool:
        if not self.state.draw_offer_pending:
            logger.debug("No draw offer to decline")
            return False
        self.state.draw_offer_pending = False
        self._begin_next_round()
        return True

    def _begin_next_round(self) -> None:
        self.state.round_number += 1
        self.state.player_places_first = not self.state.player_places_first
        self.start_round()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the match to a dictionary for snapshots."""
        return {
            'phase': self.phase.value,
            'last_outcome': self.last_outcome,
            'state': self.state.to_dict(),
            'battle': self.battle.to_dict(),
        }
