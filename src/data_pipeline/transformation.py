"""Data transformation for cleaned CDL data.

Turns cleaned stat lines into scored rows and rolls them up per player:
- Builds StatLine records from DataFrame rows
- Adds one points column per scoring category plus a fantasy_points total
- Summarizes maps played, total and average points per player
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from src.data_pipeline.config import POINTS_PREFIX, STAT_COLUMNS
from src.scoring_engine.models import ScoringRules, StatLine
from src.scoring_engine.points_calculator import compute_points, round_points

logger = logging.getLogger(__name__)

# Keys expected in the cleaned data dict passed to transform()
_REQUIRED_KEYS = {"players", "stat_lines"}


class DataTransformer:
    """Scores cleaned stat lines and merges season totals onto players."""

    def __init__(self, rules: Optional[ScoringRules] = None):
        self.rules = rules or ScoringRules()

    # ------------------------------------------------------------------
    # DataFrame -> StatLine
    # ------------------------------------------------------------------
    @staticmethod
    def to_stat_lines(df: pd.DataFrame) -> List[StatLine]:
        lines = []
        for _, r in df.iterrows():
            lines.append(StatLine(
                stat_line_id=str(r["stat_line_id"]),
                player_id=str(r["player_id"]),
                match_id=str(r["match_id"]),
                match_time=r["match_time"].to_pydatetime(),
                **{col: float(r[col]) for col in STAT_COLUMNS},
            ))
        return lines

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------
    def score_stat_lines(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add ``pts_<category>`` columns and a ``fantasy_points`` total.

        Every row is scored through compute_points, so these numbers match
        what the live scoring engine produces for the same stat line.
        """
        df = df.copy()
        breakdowns = [
            compute_points(line, self.rules) for line in self.to_stat_lines(df)
        ]

        for col in STAT_COLUMNS:
            df[f"{POINTS_PREFIX}{col}"] = [
                b.components()[col] for b in breakdowns
            ]
        df["fantasy_points"] = [b.total for b in breakdowns]
        return df

    # ------------------------------------------------------------------
    # Per-player rollup
    # ------------------------------------------------------------------
    def summarize_players(
        self, players: pd.DataFrame, scored: pd.DataFrame
    ) -> pd.DataFrame:
        """Merge per-player season totals onto the player table.

        Players without stat lines get zero maps and zero points.
        """
        sums = scored.groupby("player_id")[STAT_COLUMNS + ["fantasy_points"]].sum()
        counts = scored.groupby("player_id").size().rename("maps_played")
        summary = sums.join(counts).reset_index()

        merged = players.merge(summary, on="player_id", how="left")
        merged[STAT_COLUMNS] = merged[STAT_COLUMNS].fillna(0.0)
        merged["maps_played"] = merged["maps_played"].fillna(0).astype(int)
        merged["fantasy_points"] = merged["fantasy_points"].fillna(0.0)

        merged["total_points"] = merged["fantasy_points"].map(round_points)
        merged["avg_points"] = [
            round_points(total / maps) if maps else 0.0
            for total, maps in zip(merged["fantasy_points"], merged["maps_played"])
        ]
        return merged.drop(columns=["fantasy_points"])

    # ------------------------------------------------------------------
    # Full transform
    # ------------------------------------------------------------------
    def transform(self, cleaned: Dict[str, pd.DataFrame]) -> pd.DataFrame:
        """Score stat lines and return one summarized row per player."""
        missing = _REQUIRED_KEYS - set(cleaned)
        if missing:
            raise KeyError(f"Cleaned data is missing keys: {sorted(missing)}")

        scored = self.score_stat_lines(cleaned["stat_lines"])
        logger.info("Scored %d stat lines", len(scored))

        players = self.summarize_players(cleaned["players"], scored)
        return players.sort_values(
            ["total_points", "player_id"], ascending=[False, True]
        ).reset_index(drop=True)
