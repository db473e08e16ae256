"""
Logging setup for the CLI: console output plus optional rotating log files.
"""
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict, Optional

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party clients are chatty at DEBUG
NOISY_LOGGERS = ('urllib3', 'flickrapi', 'google.auth', 'google_auth_oauthlib',
                 'requests_oauthlib')


def setup_logging(
    log_file: Optional[str] = "transfer.log",
    level: str = "INFO",
    json_format: bool = False,
    rotate: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    separate_error_log: bool = True,
) -> None:
    """
    Configure the root logger from the ``logging`` config section.

    Args:
        log_file: Log file path, or None for console only
        level: Logging level name
        json_format: Emit one JSON object per record instead of plain text
        rotate: Rotate ``log_file`` once it reaches ``max_bytes``
        max_bytes: Size threshold for rotation
        backup_count: Rotated files to keep
        separate_error_log: Also write ERROR and above to ``<stem>_error<suffix>``
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if json_format:
        file_formatter = console_formatter = JsonFormatter()
    else:
        file_formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
        console_formatter = logging.Formatter('%(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    if not log_file:
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    def file_handler(path: Path, handler_level: int) -> logging.Handler:
        if rotate:
            handler = logging.handlers.RotatingFileHandler(
                str(path), maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        else:
            handler = logging.FileHandler(str(path), encoding='utf-8')
        handler.setLevel(handler_level)
        handler.setFormatter(file_formatter)
        return handler

    root_logger.addHandler(file_handler(log_path, log_level))
    if separate_error_log:
        error_path = log_path.with_name(f"{log_path.stem}_error{log_path.suffix}")
        root_logger.addHandler(file_handler(error_path, logging.ERROR))


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': self.formatTime(record, DATE_FORMAT),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)
