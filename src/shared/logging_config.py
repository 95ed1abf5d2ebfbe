"""Logging setup for test sessions and the CLI.

Both the CLI and the pytest session call ``setup_logging``; it installs one
rotating file handler and one console handler on the root logger and tags
every record with the scenario pytest is currently running, so interleaved
setup and verification lines in ``logs/suite.log`` can be traced back to a
test.
"""

import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from src.shared.constants import LOGGING

__all__ = [
    'ScenarioFilter',
    'current_scenario',
    'setup_logging',
]


# Serializes handler setup between the CLI and the pytest session hook
_logging_lock = threading.Lock()


def current_scenario() -> str:
    """Short id of the running test, or '-' outside pytest.

    pytest exports ``PYTEST_CURRENT_TEST`` as ``"path::test_name (phase)"``.
    """
    current = os.environ.get('PYTEST_CURRENT_TEST')
    if not current:
        return '-'
    node_id = current.rsplit(' ', 1)[0]
    return node_id.rsplit('::', 1)[-1]


class ScenarioFilter(logging.Filter):
    """Adds ``record.scenario`` for the ``%(scenario)s`` format field."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'scenario'):
            record.scenario = current_scenario()
        return True


def setup_logging(
    log_file: str = LOGGING.LOG_FILE,
    max_bytes: int = LOGGING.MAX_BYTES,
    backup_count: int = LOGGING.BACKUP_COUNT,
    level: int = logging.INFO,
) -> None:
    """Configure the root logger with a rotating suite log and console output.

    Idempotent and thread-safe: a second call with the same file and rotation
    settings adds nothing, a call with different rotation settings replaces
    the file handler.

    Args:
        log_file: Path to log file
        max_bytes: Maximum file size before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)
        level: Root logger level (DEBUG with --verbose)
    """
    with _logging_lock:
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for name in LOGGING.QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

        log_path = Path(log_file)

        has_file_handler = False
        for handler in root_logger.handlers[:]:
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == str(log_path.absolute()):
                if handler.maxBytes == max_bytes and handler.backupCount == backup_count:
                    has_file_handler = True
                    break
                # Rotation settings changed
                root_logger.removeHandler(handler)
                handler.close()

        # FileHandler is the base class of every file-based handler
        has_console_handler = any(
            isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            for h in root_logger.handlers
        )

        if has_file_handler and has_console_handler:
            return

        log_path.parent.mkdir(parents=True, exist_ok=True)

        formatter = logging.Formatter(LOGGING.FORMAT)
        new_handlers = []

        if not has_file_handler:
            new_handlers.append(RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8',
            ))

        if not has_console_handler:
            new_handlers.append(logging.StreamHandler())

        for handler in new_handlers:
            handler.setFormatter(formatter)
            handler.addFilter(ScenarioFilter())
            root_logger.addHandler(handler)
