"""
Match-level state persisting across rounds: scores, fatigue and overtime.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from battlegrid.constants import Archetype, Team
from battlegrid.utils.settings import MatchSettings

logger = logging.getLogger(__name__)


class MatchState:
    """Scores, round counter, placement order, fatigue and overtime of one match."""

    def __init__(self) -> None:
        self.scores: Dict[Team, int] = {team: 0 for team in Team}
        self.round_number = 1
        self.player_places_first = True
        # archetype -> rounds until available again
        self.fatigue: Dict[Team, Dict[Archetype, int]] = {team: {} for team in Team}
        self.overtime_count = 0
        self.draw_offer_pending = False
        self.game_draw = False
        self.next_unit_id = 1

    def new_unit_id(self, team: Team) -> str:
        """Get a fresh unit id, unique for the whole match."""
        unit_id = f"{team.value[0]}{self.next_unit_id}"
        self.next_unit_id += 1
        return unit_id

    def banned(self, team: Team) -> List[Archetype]:
        """Archetypes the team may not place this round."""
        return [a for a, rounds in self.fatigue[team].items() if rounds > 0]

    def update_fatigue(self, team: Team, survivors: List[Archetype]) -> None:
        """
        Rest previously banned archetypes and ban this round's survivors.

        A banned archetype sits out exactly one round, then becomes available
        again even if it would otherwise survive again.
        """
        rested = {a: rounds - 1 for a, rounds in self.fatigue[team].items() if rounds - 1 > 0}
        for archetype in survivors:
            if archetype not in self.fatigue[team]:
                rested[archetype] = 1
        self.fatigue[team] = rested
        logger.debug(f"{team.value} fatigued: {[a.value for a in self.banned(team)]}")

    def max_units(self, team: Team, settings: MatchSettings) -> int:
        """Placement quota including the comeback bonus for a trailing team."""
        deficit = self.scores[team.opponent] - self.scores[team]
        bonus = sum(1 for threshold in settings.comeback_thresholds if deficit >= threshold)
        return settings.base_units + bonus

    def in_overtime(self, settings: MatchSettings) -> bool:
        return all(score >= settings.overtime_threshold for score in self.scores.values())

    def award(self, winner: Optional[Team]) -> None:
        """Score a round. ``None`` means both teams score."""
        if winner is None:
            for team in Team:
                self.scores[team] += 1
        else:
            self.scores[winner] += 1

    def check_game_over(self, settings: MatchSettings) -> Tuple[bool, Optional[Team], bool]:
        """
        Check whether the match has ended.

        Returns:
            Tuple of (over, winner, draw)
        """
        if self.game_draw:
            return True, None, True
        player = self.scores[Team.PLAYER]
        enemy = self.scores[Team.ENEMY]
        if self.in_overtime(settings):
            if self.overtime_count >= settings.max_overtimes:
                return True, None, True
            if abs(player - enemy) >= 2:
                return True, Team.PLAYER if player > enemy else Team.ENEMY, False
            return False, None, False
        if player >= settings.win_score and player > enemy:
            return True, Team.PLAYER, False
        if enemy >= settings.win_score and enemy > player:
            return True, Team.ENEMY, False
        return False, None, False

    def to_dict(self) -> Dict[str, Any]:
        """Convert match state to dictionary for serialization."""
        return {
            'scores': {team.value: score for team, score in self.scores.items()},
            'round_number': self.round_number,
            'player_places_first': self.player_places_first,
            'fatigue': {
                team.value: {a.value: rounds for a, rounds in fatigue.items()}
                for team, fatigue in self.fatigue.items()
            },
            'overtime_count': self.overtime_count,
            'draw_offer_pending': self.draw_offer_pending,
            'game_draw': self.game_draw,
            'next_unit_id': self.next_unit_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchState':
        """Restore match state from dictionary."""
        state = cls()
        state.scores = {Team(code): score for code, score in data['scores'].items()}
        state.round_number = data.get('round_number', 1)
        state.player_places_first = data.get('player_places_first', True)
        state.fatigue = {
            Team(code): {Archetype.from_code(a): rounds for a, rounds in fatigue.items()}
            for code, fatigue in data.get('fatigue', {}).items()
        }
        for team in Team:
            state.fatigue.setdefault(team, {})
        state.overtime_count = data.get('overtime_count', 0)
        state.draw_offer_pending = data.get('draw_offer_pending', False)
        state.game_draw = data.get('game_draw', False)
        state.next_unit_id = data.get('next_unit_id', 1)
        return state
