"""
Battle events emitted for presentation layers.

Events are a side channel: they describe what happened during a tick so a
renderer can animate it, but they are not part of the authoritative state.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

HIT = 'hit'
KILL = 'kill'
HEAL = 'heal'
FREEZE = 'freeze'


@dataclass
class BattleEvent:
    """One visible combat occurrence."""
    type: str
    tick: int
    attacker_id: str
    attacker_pos: Tuple[int, int]
    icon: str
    target_id: str
    target_pos: Tuple[int, int]
    damage: int = 0
    is_strong: bool = False
    is_weak: bool = False
    is_ranged: bool = False
    is_aoe: bool = False
    aoe_cells: List[Tuple[int, int]] = field(default_factory=list)
    heal_amount: int = 0
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
