from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
PROCESSED_DATA_DIR = PROJECT_ROOT / "data" / "processed"
DRAFTS_DIR = PROJECT_ROOT / "data" / "drafts"

# Default league settings
DEFAULT_SECONDS_PER_PICK = 60
DEFAULT_ROSTER_SIZE = 6
DEFAULT_STARTER_COUNT = 4
DEFAULT_MAX_TEAMS = 8

# League setting bounds
MIN_PARTICIPANTS = 2
MAX_TEAMS = 16
MIN_ROSTER_SIZE = 4
MAX_ROSTER_SIZE = 10
MIN_STARTER_COUNT = 2
MAX_STARTER_COUNT = 6

# Notification event kinds
EVENT_DRAFT_STARTED = "draft-started"
EVENT_PICK_MADE = "pick-made"
EVENT_DRAFT_COMPLETE = "draft-complete"
EVENT_DRAFT_STALLED = "draft-stalled"
