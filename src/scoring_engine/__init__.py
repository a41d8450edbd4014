from src.scoring_engine.models import (
    MatchupResult,
    PointsBreakdown,
    ScoringRules,
    ScoringWindow,
    StatLine,
    TeamTotal,
)
from src.scoring_engine.points_calculator import compute_points, round_points
from src.scoring_engine.team_scoring import (
    Standings,
    StandingsRecord,
    TeamScorer,
    rescore_league,
)

__all__ = [
    "MatchupResult",
    "PointsBreakdown",
    "ScoringRules",
    "ScoringWindow",
    "Standings",
    "StandingsRecord",
    "StatLine",
    "TeamScorer",
    "TeamTotal",
    "compute_points",
    "rescore_league",
    "round_points",
]
