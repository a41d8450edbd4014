from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"

DEFAULT_SEASON = 2025

# CSV export file name patterns (use .format(season=YYYY))
FILE_PATTERNS = {
    "players": "cdl_players_{season}.csv",
    "stat_lines": "cdl_stat_lines_{season}.csv",
}

REQUIRED_PLAYER_COLUMNS = {"player_id", "gamer_tag"}

STAT_COLUMNS = [
    "kills",
    "deaths",
    "assists",
    "damage",
    "objective_time",
    "bomb_plants",
    "bomb_defuses",
    "first_bloods",
]
REQUIRED_STAT_LINE_COLUMNS = {"stat_line_id", "player_id", "match_id", "match_time"}

# Raw role labels mapped to the canonical SMG, AR and Flex roles
ROLE_ALIASES = {
    "SMG": "SMG",
    "SUB": "SMG",
    "AR": "AR",
    "RIFLE": "AR",
    "FLEX": "Flex",
}

# Column prefix for per-category point columns
POINTS_PREFIX = "pts_"
