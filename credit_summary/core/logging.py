import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from credit_summary.core.config import settings

LOG_FILE_NAME = "credit_summary.log"


def setup_logging(log_dir: Path | None = None) -> Path:
    """Configure root logging: console plus a rotating file. Returns the log file path."""

    target_dir = Path(log_dir or settings.log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / LOG_FILE_NAME

    # time | level | module:line | message
    log_format = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s")
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    # 5 MB per file, 5 backups
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(log_format)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # drop previous handlers so repeated calls do not double-print
    root_logger.handlers = []

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging initialized. Logs will be written to: %s", log_file.absolute())
    return log_file
