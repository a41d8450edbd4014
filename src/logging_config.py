import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "cdl_fantasy.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotate at 5MB, keep 3 backups
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _level(log_level: str) -> int:
    return getattr(logging, log_level.upper(), logging.INFO)


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> Path:
    """Configure root logging for the CDL fantasy draft services.

    Writes DEBUG and above to a rotating file under ``log_dir`` (``logs/`` at
    the project root by default) and ``log_level`` and above to the console.
    Safe to call more than once; only the first call installs handlers.

    Returns:
        Path of the log file.
    """
    log_dir = Path(log_dir) if log_dir is not None else Path(__file__).parent.parent / "logs"
    log_file = log_dir / LOG_FILE_NAME

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return log_file  # Already configured

    log_dir.mkdir(parents=True, exist_ok=True)
    root_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(_level(log_level))
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).info(
        "Logging initialized (level=%s, file=%s)", log_level, log_file
    )
    return log_file
