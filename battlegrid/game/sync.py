"""
Two-party play: one authoritative side resolves ticks, the other mirrors.

The host is the only side that mutates battle state. After every tick and
every phase transition it publishes a JSON-compatible snapshot; the mirror
rebuilds its view from snapshots alone and has no way to change the battle.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from battlegrid.constants import Ability, Archetype, Phase, Team
from battlegrid.core.battle_state import BattleState
from battlegrid.core.match_state import MatchState
from battlegrid.core.unit import Unit
from battlegrid.game.match import Match

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]

TICK = 'tick'
PHASE = 'phase'


class AuthoritativeHost:
    """Wraps a Match and broadcasts its state after every change."""

    def __init__(self, match: Match) -> None:
        self.match = match
        self.seq = 0
        self.listeners: List[Callable[[Snapshot], None]] = []
        self.outbox: List[Snapshot] = []

    def subscribe(self, listener: Callable[[Snapshot], None]) -> None:
        """Register a transport callback receiving every snapshot."""
        self.listeners.append(listener)

    def snapshot(self, kind: str) -> Snapshot:
        """Serialize the current battle and match state."""
        self.seq += 1
        return {
            'kind': kind,
            'seq': self.seq,
            'tick': self.match.battle.tick,
            'battle': self.match.battle.to_dict(),
            'match': {
                **self.match.state.to_dict(),
                'phase': self.match.phase.value,
                'last_outcome': self.match.last_outcome,
            },
        }

    def publish(self, kind: str) -> Snapshot:
        snap = self.snapshot(kind)
        self.outbox.append(snap)
        for listener in self.listeners:
            listener(snap)
        return snap

    def _after(self, phase_before: Phase, kind: str) -> None:
        if kind == TICK or self.match.phase is not phase_before:
            self.publish(kind)
        if kind == TICK and self.match.phase is not phase_before:
            self.publish(PHASE)

    def place_unit(self, archetype: Union[Archetype, str], row: int, col: int) -> Optional[Unit]:
        unit = self.match.place_unit(archetype, row, col)
        if unit is not None:
            self.publish(PHASE)
        return unit

    def remove_unit(self, unit_id: str) -> bool:
        removed = self.match.remove_unit(unit_id)
        if removed:
            self.publish(PHASE)
        return removed

    def confirm_placement(self) -> bool:
        before = self.match.phase
        ok = self.match.confirm_placement()
        self._after(before, PHASE)
        return ok

    def start_battle(self) -> bool:
        before = self.match.phase
        ok = self.match.start_battle()
        self._after(before, PHASE)
        return ok

    def tick(self) -> Optional[str]:
        """Resolve one tick and publish the result."""
        before = self.match.phase
        if before is not Phase.BATTLE:
            return None
        outcome = self.match.tick()
        self._after(before, TICK)
        return outcome

    def expire_timer(self) -> Optional[str]:
        before = self.match.phase
        outcome = self.match.expire_timer()
        self._after(before, PHASE)
        return outcome

    def activate_ability(self, ability: Union[Ability, str], team: Team = Team.PLAYER) -> bool:
        ok = self.match.activate_ability(ability, team)
        if ok:
            self.publish(PHASE)
        return ok

    def next_round(self) -> bool:
        ok = self.match.next_round()
        if ok:
            self.publish(PHASE)
        return ok


class SnapshotMirror:
    """Read-only replica rebuilt from the host's snapshots."""

    def __init__(self) -> None:
        self.seq = 0
        self.battle: Optional[BattleState] = None
        self.state: Optional[MatchState] = None
        self.phase: Optional[Phase] = None
        self.last_outcome: Optional[str] = None

    def apply(self, snapshot: Snapshot) -> bool:
        """
        Replace the local view with a snapshot.

        Returns:
            True if applied, False if the snapshot is older than the current view
        """
        if snapshot['seq'] <= self.seq:
            logger.debug(f"Ignoring stale snapshot {snapshot['seq']} (at {self.seq})")
            return False
        match_data = snapshot['match']
        self.battle = BattleState.from_dict(snapshot['battle'])
        self.state = MatchState.from_dict(match_data)
        self.phase = Phase(match_data['phase'])
        self.last_outcome = match_data.get('last_outcome')
        self.seq = snapshot['seq']
        return True

    @property
    def current_tick(self) -> int:
        return self.battle.tick if self.battle is not None else 0
