import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "draft_coordinator.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("asyncio", "concurrent.futures")


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Configure root logging for draft processes.

    Args:
        log_level: Console level name; the log file always records DEBUG.
        log_dir: Directory for the rotating log file (default ``<project>/logs``).
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return  # Already configured

    log_dir = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # File handler with rotation (5MB max, keep 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=5 * 1024 * 1024, backupCount=3
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized (console=%s, file=%s)",
        log_level, log_dir / LOG_FILE_NAME,
    )
