"""Team aggregation, matchup resolution and league re-scoring.

Builds on :func:`compute_points`: every number here is a sum of stat-line
totals produced by that single function.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from src.scoring_engine.models import (
    MatchupResult,
    PointsBreakdown,
    ScoringRules,
    ScoringWindow,
    StatLine,
    TeamTotal,
)
from src.scoring_engine.points_calculator import compute_points

logger = logging.getLogger(__name__)


def rescore_league(
    stat_lines: Iterable[StatLine], rules: ScoringRules
) -> Dict[str, PointsBreakdown]:
    """Recompute every stat line's breakdown under (possibly new) rules.

    Returns:
        Dict mapping ``stat_line_id`` to :class:`PointsBreakdown`.
    """
    breakdowns = {line.stat_line_id: compute_points(line, rules) for line in stat_lines}
    logger.info("Re-scored %d stat lines", len(breakdowns))
    return breakdowns


class TeamScorer:
    """Aggregate stat-line points into fantasy team totals.

    Stateless apart from the league's scoring rules. Lineups are any object
    with ``starters`` and ``bench`` player-id lists.
    """

    def __init__(self, rules: ScoringRules):
        self.rules = rules

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def team_total(
        self,
        team_id: str,
        window: ScoringWindow,
        lineup,
        stat_lines: Iterable[StatLine],
    ) -> TeamTotal:
        """Score one team's locked lineup for a window.

        Only stat lines whose match falls inside the window count. Starter
        points form the competitive score; bench points are tracked but
        never added to it. A missing lineup scores zero.
        """
        if lineup is None:
            return TeamTotal(team_id=team_id, window_id=window.window_id)

        starters = set(lineup.starters)
        bench = set(lineup.bench)

        starter_points = 0.0
        bench_points = 0.0
        for line in stat_lines:
            if not window.contains(line.match_time):
                continue
            if line.player_id in starters:
                starter_points += compute_points(line, self.rules).total
            elif line.player_id in bench:
                bench_points += compute_points(line, self.rules).total

        return TeamTotal(
            team_id=team_id,
            window_id=window.window_id,
            starter_points=starter_points,
            bench_points=bench_points,
        )

    def period_totals(
        self,
        team_ids: Iterable[str],
        window: ScoringWindow,
        lineup_source,
        stat_lines: Iterable[StatLine],
    ) -> Dict[str, TeamTotal]:
        """Score every team in a league for one window.

        Args:
            team_ids: Fantasy team IDs in the league.
            window: The scoring window being closed.
            lineup_source: Anything with ``get_lineup(team_id, window_id)``.
            stat_lines: Candidate stat lines; filtered to the window here.
        """
        in_window = [line for line in stat_lines if window.contains(line.match_time)]
        totals = {}
        for team_id in team_ids:
            lineup = lineup_source.get_lineup(team_id, window.window_id)
            if lineup is None:
                logger.info(
                    "Team %s has no lineup for window %s, scoring 0",
                    team_id,
                    window.window_id,
                )
            totals[team_id] = self.team_total(team_id, window, lineup, in_window)
        return totals

    @staticmethod
    def resolve_matchup(team1: TeamTotal, team2: TeamTotal) -> MatchupResult:
        """Higher starter score wins; equal scores are a tie."""
        if team1.window_id != team2.window_id:
            raise ValueError(
                f"Cannot compare totals from windows {team1.window_id} "
                f"and {team2.window_id}"
            )

        winner_id: Optional[str] = None
        if team1.score > team2.score:
            winner_id = team1.team_id
        elif team2.score > team1.score:
            winner_id = team2.team_id

        return MatchupResult(
            window_id=team1.window_id,
            team1_id=team1.team_id,
            team2_id=team2.team_id,
            team1_score=team1.score,
            team2_score=team2.score,
            winner_id=winner_id,
        )


@dataclass
class StandingsRecord:
    team_id: str
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0


class Standings:
    """Win/loss/tie table accumulated from resolved matchups."""

    def __init__(self, team_ids: Iterable[str]):
        self._records: Dict[str, StandingsRecord] = {
            team_id: StandingsRecord(team_id=team_id) for team_id in team_ids
        }

    def record(self, result: MatchupResult):
        team1 = self._get(result.team1_id)
        team2 = self._get(result.team2_id)

        if result.is_tie:
            team1.ties += 1
            team2.ties += 1
        elif result.winner_id == result.team1_id:
            team1.wins += 1
            team2.losses += 1
        else:
            team2.wins += 1
            team1.losses += 1

        team1.points_for += result.team1_score
        team2.points_for += result.team2_score

    def get(self, team_id: str) -> StandingsRecord:
        return self._get(team_id)

    def table(self) -> List[StandingsRecord]:
        """Records ordered by wins, then ties, then points scored."""
        return sorted(
            self._records.values(),
            key=lambda r: (-r.wins, -r.ties, -r.points_for, r.team_id),
        )

    def _get(self, team_id: str) -> StandingsRecord:
        if team_id not in self._records:
            raise KeyError(f"Team {team_id} is not in these standings")
        return self._records[team_id]
