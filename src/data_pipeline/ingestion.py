"""CSV ingestion for CDL player and stat-line exports.

Handles the quirks of the stats exports:
- Extra columns the pipeline does not use
- Comma-formatted numbers (e.g., "3,904")
- Blank rows at the end of the file
"""

import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from src.data_pipeline.config import (
    FILE_PATTERNS,
    REQUIRED_PLAYER_COLUMNS,
    REQUIRED_STAT_LINE_COLUMNS,
    STAT_COLUMNS,
)

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Raised when CSV ingestion fails."""


def _parse_numeric(value):
    """Parse a numeric string that may contain commas (e.g., '3,904' -> 3904.0)."""
    if pd.isna(value):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).replace(",", "").strip().strip('"')
    if s == "" or s.isspace():
        return float("nan")
    try:
        return float(s)
    except ValueError:
        return float("nan")


class CdlStatsIngester:
    """Reads CDL CSV exports for one season.

    Each read method returns a pandas DataFrame with:
    - Normalized (lower-case, stripped) column names
    - Numeric stat columns parsed as floats
    - Fully blank rows removed
    """

    def __init__(self, data_dir: Path, season: int):
        self.data_dir = Path(data_dir)
        self.season = season

    def _resolve_path(self, file_key: str) -> Path:
        """Build the full file path for a given file key, raising if missing."""
        filename = FILE_PATTERNS[file_key].format(season=self.season)
        filepath = self.data_dir / filename
        if not filepath.exists():
            raise FileNotFoundError(f"Expected file not found: {filepath}")
        return filepath

    @staticmethod
    def _read_csv(filepath: Path, required: set) -> pd.DataFrame:
        df = pd.read_csv(filepath, dtype=str, quotechar='"', skip_blank_lines=True)
        df.columns = [str(c).strip().lower() for c in df.columns]

        missing = required - set(df.columns)
        if missing:
            raise IngestionError(
                f"{filepath.name} is missing required columns: {sorted(missing)}"
            )

        return df.dropna(how="all").reset_index(drop=True)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    def read_players(self) -> pd.DataFrame:
        """Read the player catalog export.

        Returns DataFrame with columns:
            player_id, gamer_tag, team, role, adp, is_active
        """
        filepath = self._resolve_path("players")
        logger.info("Reading players: %s", filepath.name)

        df = self._read_csv(filepath, REQUIRED_PLAYER_COLUMNS)
        for col in ("team", "role", "adp", "is_active"):
            if col not in df.columns:
                df[col] = None

        df["adp"] = pd.to_numeric(df["adp"].map(_parse_numeric), errors="coerce")

        logger.info("Loaded %d players", len(df))
        return df

    # ------------------------------------------------------------------
    # Stat lines
    # ------------------------------------------------------------------
    def read_stat_lines(self) -> pd.DataFrame:
        """Read per-map stat lines.

        Returns DataFrame with columns:
            stat_line_id, player_id, match_id, match_time, plus one float
            column per scoring stat
        """
        filepath = self._resolve_path("stat_lines")
        logger.info("Reading stat lines: %s", filepath.name)

        df = self._read_csv(filepath, REQUIRED_STAT_LINE_COLUMNS)
        for col in STAT_COLUMNS:
            if col not in df.columns:
                logger.warning("%s has no %s column, using 0", filepath.name, col)
                df[col] = 0.0
            else:
                df[col] = pd.to_numeric(df[col].map(_parse_numeric), errors="coerce")

        logger.info("Loaded %d stat lines", len(df))
        return df

    def read_all(self) -> Dict[str, pd.DataFrame]:
        """Read both exports into a dict keyed by file key."""
        return {
            "players": self.read_players(),
            "stat_lines": self.read_stat_lines(),
        }
