"""
Match configuration.

Settings are passed into a match explicitly; the simulator never reads
configuration from files or globals.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from battlegrid.constants import BASE_UNITS

FOCUS_FIRE_RULES = ('lowest_hp', 'highest_hp')


@dataclass
class MatchSettings:
    """
    Configuration for a match.

    Attributes:
        win_score: Points needed to win outside overtime
        overtime_threshold: Once both teams reach this score a 2-point lead is needed
        max_overtimes: Overtime rounds after which the game is a forced draw
        draw_offer_after: Overtime rounds after which a draw is offered
        base_units: Placement quota without comeback bonus
        comeback_thresholds: Point deficits that each grant one extra placement slot
        round_time_limit: Battle timer in seconds
        tick_interval: Seconds per battle tick
        place_time_limit: Placement timer in seconds (enforced by the caller)
        difficulty: Opponent difficulty, 1-5
        focus_fire_rule: 'lowest_hp' or 'highest_hp'
        splash_basis: 'modified' or 'raw'
        damage_variance: Roll the +/-5% damage variance
        use_bonds: Bond units to adjacent tanks when placement is confirmed
    """

    # Scoring
    win_score: int = 5
    overtime_threshold: int = 4
    max_overtimes: int = 5
    draw_offer_after: int = 3

    # Placement
    base_units: int = BASE_UNITS
    comeback_thresholds: List[int] = field(default_factory=lambda: [2, 4])

    # Timing
    round_time_limit: float = 60.0
    tick_interval: float = 0.8
    place_time_limit: float = 30.0

    # Opponent and rules
    difficulty: int = 2
    focus_fire_rule: str = 'lowest_hp'
    splash_basis: str = 'modified'
    damage_variance: bool = True
    use_bonds: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 1 <= self.difficulty <= 5:
            raise ValueError(f"Difficulty must be between 1 and 5, got {self.difficulty}")
        if self.focus_fire_rule not in FOCUS_FIRE_RULES:
            raise ValueError(f"Invalid focus fire rule: {self.focus_fire_rule}")
        if self.splash_basis not in ('modified', 'raw'):
            raise ValueError(f"Invalid splash basis: {self.splash_basis}")
        if self.tick_interval <= 0 or self.round_time_limit <= 0:
            raise ValueError("Time limits must be positive")
        if self.base_units < 1:
            raise ValueError(f"base_units must be positive, got {self.base_units}")
        if self.overtime_threshold > self.win_score:
            raise ValueError("overtime_threshold cannot exceed win_score")
        self.comeback_thresholds = sorted(self.comeback_thresholds)

    @property
    def max_battle_ticks(self) -> int:
        """Number of ticks that fit in the battle timer."""
        return int(round(self.round_time_limit / self.tick_interval))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchSettings":
        """
        Create MatchSettings from dictionary.

        Unknown keys are ignored so configs from newer versions still load.

        Args:
            data: Configuration dictionary

        Returns:
            MatchSettings instance
        """
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
