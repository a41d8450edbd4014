"""Run the complete CDL data pipeline.

Usage:
    python -m src.data_pipeline.run_update [season] [data_dir]

Examples:
    python -m src.data_pipeline.run_update 2025
    python -m src.data_pipeline.run_update 2025 /path/to/csvs
"""

import json
import logging
import math
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

from src.data_pipeline.cleaning import DataCleaner
from src.data_pipeline.config import (
    DEFAULT_SEASON,
    PROCESSED_DATA_DIR,
    RAW_DATA_DIR,
    STAT_COLUMNS,
)
from src.data_pipeline.ingestion import CdlStatsIngester
from src.data_pipeline.transformation import DataTransformer
from src.logging_config import setup_logging
from src.scoring_engine.models import ScoringRules

logger = logging.getLogger(__name__)


def _safe(val, default=None):
    """Return *default* when *val* is NaN/None/pd.NA, else the value."""
    if val is None or val is pd.NA:
        return default
    if isinstance(val, float) and math.isnan(val):
        return default
    return val


def _player_to_dict(row: pd.Series) -> dict:
    """Convert a single player row to the output JSON structure."""
    adp = _safe(row.get("adp"))
    return {
        "player_id": row["player_id"],
        "gamer_tag": row["gamer_tag"],
        "team": _safe(row.get("team")),
        "role": _safe(row.get("role")),
        "average_draft_position": float(adp) if adp is not None else None,
        "is_active": bool(row.get("is_active", True)),
        "season_stats": {
            col: float(_safe(row.get(col), 0)) for col in STAT_COLUMNS
        },
        "maps_played": int(_safe(row.get("maps_played"), 0)),
        "total_points": float(_safe(row.get("total_points"), 0)),
        "avg_points": float(_safe(row.get("avg_points"), 0)),
    }


def run_pipeline(
    season: int = DEFAULT_SEASON,
    data_dir: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    rules: Optional[ScoringRules] = None,
) -> Path:
    """Run the complete CDL data pipeline.

    Args:
        season: Season year.
        data_dir: Directory containing raw CSVs.
            Defaults to ``data/raw/{season}``.
        output_dir: Directory for JSON output.
            Defaults to ``data/processed/``.
        rules: Scoring weights used for season totals (defaults if None).

    Returns:
        Path to the generated JSON file.

    Raises:
        FileNotFoundError: If the data directory doesn't exist.
    """
    if data_dir is None:
        data_dir = RAW_DATA_DIR / str(season)
    if output_dir is None:
        output_dir = PROCESSED_DATA_DIR
    data_dir = Path(data_dir)
    output_dir = Path(output_dir)
    rules = rules or ScoringRules()

    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found: {data_dir}")

    logger.info("Starting pipeline for %d season (data: %s)", season, data_dir)

    # 1. Ingest
    logger.info("Step 1/4: Ingesting CSV files...")
    raw = CdlStatsIngester(data_dir, season).read_all()
    logger.info(
        "Loaded: %d players, %d stat lines",
        len(raw["players"]), len(raw["stat_lines"]),
    )

    # 2. Clean
    logger.info("Step 2/4: Cleaning data...")
    cleaned = DataCleaner().clean_all(raw)

    # 3. Score and summarize
    logger.info("Step 3/4: Scoring stat lines...")
    players_df = DataTransformer(rules).transform(cleaned)

    # 4. Output JSON
    logger.info("Step 4/4: Generating JSON output...")
    players_list = [_player_to_dict(row) for _, row in players_df.iterrows()]

    output_data = {
        "metadata": {
            "version": "1.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": "CDL",
            "season": season,
            "scoring_rules": rules.to_dict(),
            "total_players": len(players_list),
            "total_stat_lines": len(cleaned["stat_lines"]),
        },
        "players": players_list,
    }

    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"players_{season}.json"

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(output_data, f, indent=2)

    # Update latest symlink
    latest_link = output_dir / "players_latest.json"
    if latest_link.exists() or latest_link.is_symlink():
        latest_link.unlink()
    latest_link.symlink_to(output_file.name)

    role_counts: dict = {}
    for p in players_list:
        role = p["role"] or "UNKNOWN"
        role_counts[role] = role_counts.get(role, 0) + 1

    logger.info("Pipeline complete! Output: %s", output_file)
    logger.info("  Total players: %d", len(players_list))
    logger.info(
        "  By role: %s",
        ", ".join(f"{k}={v}" for k, v in sorted(role_counts.items())),
    )

    return output_file


if __name__ == "__main__":
    setup_logging()

    season = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEASON
    data_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    try:
        output = run_pipeline(season, data_dir)
        print(f"Pipeline complete: {output}")
    except Exception:
        logger.exception("Pipeline failed")
        sys.exit(1)
