"""Data models for the scoring engine."""

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Dict, Optional

from src.scoring_engine.config import (
    CAMEL_CASE_RULE_KEYS,
    DEFAULT_ASSIST_POINTS,
    DEFAULT_BOMB_DEFUSE_POINTS,
    DEFAULT_BOMB_PLANT_POINTS,
    DEFAULT_DAMAGE_POINTS,
    DEFAULT_DEATH_POINTS,
    DEFAULT_FIRST_BLOOD_POINTS,
    DEFAULT_KILL_POINTS,
    DEFAULT_OBJECTIVE_TIME_POINTS,
)


@dataclass(frozen=True)
class ScoringRules:
    """Per-league scoring weights. Immutable snapshot."""

    kill_points: float = DEFAULT_KILL_POINTS
    death_points: float = DEFAULT_DEATH_POINTS
    assist_points: float = DEFAULT_ASSIST_POINTS
    damage_points: float = DEFAULT_DAMAGE_POINTS  # Per 100 damage
    objective_time_points: float = DEFAULT_OBJECTIVE_TIME_POINTS  # Per second
    bomb_plant_points: float = DEFAULT_BOMB_PLANT_POINTS
    bomb_defuse_points: float = DEFAULT_BOMB_DEFUSE_POINTS
    first_blood_points: float = DEFAULT_FIRST_BLOOD_POINTS

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ScoringRules":
        """Build rules from a stored mapping.

        Accepts snake_case or camelCase keys; missing keys keep their
        defaults and unknown keys are ignored.

        Raises:
            ValueError: If a weight is not a number.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = CAMEL_CASE_RULE_KEYS.get(key, key)
            if name not in known:
                continue
            try:
                values[name] = float(value)
            except (TypeError, ValueError) as e:
                raise ValueError(
                    f"Scoring rule {key!r} must be numeric, got {value!r}"
                ) from e
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class StatLine:
    """A single player's performance on one map."""

    stat_line_id: str
    player_id: str
    match_id: str
    match_time: datetime
    kills: float = 0
    deaths: float = 0
    assists: float = 0
    damage: float = 0
    objective_time: float = 0  # Seconds on objective
    bomb_plants: float = 0
    bomb_defuses: float = 0
    first_bloods: float = 0


@dataclass(frozen=True)
class PointsBreakdown:
    """Fantasy points per scoring category for one stat line."""

    kills: float
    deaths: float
    assists: float
    damage: float
    objective_time: float
    bomb_plants: float
    bomb_defuses: float
    first_bloods: float
    total: float

    def components(self) -> Dict[str, float]:
        """Category points without the total."""
        values = asdict(self)
        values.pop("total")
        return values


@dataclass(frozen=True)
class ScoringWindow:
    """A bounded period (usually a week) whose stat lines form one score.

    A match belongs to the window when ``start <= match_time < end``.
    """

    window_id: str
    start: datetime
    end: datetime
    lock_time: Optional[datetime] = None

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(
                f"Scoring window {self.window_id} must end after it starts"
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def is_locked_at(self, moment: datetime) -> bool:
        lock_time = self.lock_time or self.start
        return moment >= lock_time


@dataclass(frozen=True)
class TeamTotal:
    """A fantasy team's points for one scoring window."""

    team_id: str
    window_id: str
    starter_points: float = 0.0
    bench_points: float = 0.0

    @property
    def score(self) -> float:
        """Competitive score - starters only."""
        return self.starter_points


@dataclass(frozen=True)
class MatchupResult:
    """Outcome of a head-to-head matchup. ``winner_id`` is None on a tie."""

    window_id: str
    team1_id: str
    team2_id: str
    team1_score: float
    team2_score: float
    winner_id: Optional[str]

    @property
    def is_tie(self) -> bool:
        return self.winner_id is None
