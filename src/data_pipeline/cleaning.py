"""Data cleaning for CDL CSV data.

Handles standardization across the two exports:
- Strip whitespace from IDs and gamer tags
- Canonicalize team abbreviations and player roles
- Parse match times as UTC and stat columns as numbers
- Drop duplicates and stat lines for players not in the catalog
"""

import logging
from typing import Dict, Iterable, Optional

import pandas as pd

from src.data_pipeline.config import ROLE_ALIASES, STAT_COLUMNS

logger = logging.getLogger(__name__)

_FALSE_STRINGS = {"false", "0", "no", "n", "inactive"}


class DataCleaner:
    """Cleans and standardizes CDL data for scoring and catalog loading."""

    # ------------------------------------------------------------------
    # Field helpers
    # ------------------------------------------------------------------
    @staticmethod
    def canonical_role(role) -> Optional[str]:
        """Map a raw role string to SMG, AR or Flex.

        Examples:
            "smg"   -> "SMG"
            "Rifle" -> "AR"
            "flex"  -> "Flex"
        """
        if pd.isna(role):
            return None
        return ROLE_ALIASES.get(str(role).strip().upper())

    @staticmethod
    def parse_active(value) -> bool:
        """Missing means active; common false-ish strings mean inactive."""
        if pd.isna(value):
            return True
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() not in _FALSE_STRINGS

    @staticmethod
    def _strip(series: pd.Series) -> pd.Series:
        """Strip strings; blank strings become None."""
        return series.map(lambda v: (v.strip() or None) if isinstance(v, str) else v)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    def clean_players(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["player_id"] = self._strip(df["player_id"])
        df["gamer_tag"] = self._strip(df["gamer_tag"])

        missing = df["player_id"].isna() | df["gamer_tag"].isna()
        if missing.any():
            logger.warning("Dropping %d players with no id or gamer tag", missing.sum())
            df = df[~missing].copy()

        df["team"] = self._strip(df["team"]).map(
            lambda v: v.upper() if isinstance(v, str) else None
        )

        roles = df["role"].map(self.canonical_role)
        unknown = roles.isna() & df["role"].notna()
        if unknown.any():
            logger.warning(
                "Unrecognized roles set to None: %s",
                sorted(df.loc[unknown, "role"].astype(str).unique()),
            )
        df["role"] = roles
        df["is_active"] = df["is_active"].map(self.parse_active)

        dupes = df["player_id"].duplicated(keep="first")
        if dupes.any():
            logger.warning(
                "Dropping %d duplicate player rows: %s",
                dupes.sum(),
                df.loc[dupes, "player_id"].tolist(),
            )
            df = df[~dupes]

        return df.reset_index(drop=True)

    # ------------------------------------------------------------------
    # Stat lines
    # ------------------------------------------------------------------
    def clean_stat_lines(
        self, df: pd.DataFrame, known_player_ids: Optional[Iterable[str]] = None
    ) -> pd.DataFrame:
        df = df.copy()
        for col in ("stat_line_id", "player_id", "match_id"):
            df[col] = self._strip(df[col])

        df[STAT_COLUMNS] = df[STAT_COLUMNS].fillna(0.0)

        df["match_time"] = pd.to_datetime(
            df["match_time"], utc=True, errors="coerce", format="ISO8601"
        )
        bad_time = df["match_time"].isna()
        if bad_time.any():
            logger.warning("Dropping %d stat lines with no match time", bad_time.sum())
            df = df[~bad_time]

        dupes = df["stat_line_id"].duplicated(keep="first")
        if dupes.any():
            logger.warning("Dropping %d duplicate stat lines", dupes.sum())
            df = df[~dupes]

        if known_player_ids is not None:
            known = set(known_player_ids)
            unknown = ~df["player_id"].isin(known)
            if unknown.any():
                logger.warning(
                    "Dropping %d stat lines for unknown players: %s",
                    unknown.sum(),
                    sorted(df.loc[unknown, "player_id"].unique()),
                )
                df = df[~unknown]

        return df.reset_index(drop=True)

    def clean_all(self, raw: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
        players = self.clean_players(raw["players"])
        stat_lines = self.clean_stat_lines(
            raw["stat_lines"], known_player_ids=players["player_id"]
        )
        return {"players": players, "stat_lines": stat_lines}
