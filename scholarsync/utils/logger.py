"""
Loguru setup for ScholarSync.

Turn and tool records are bound with ``turn_id`` and ``project_id``
(see TurnOrchestrator); both sinks print them so one turn can be
followed across the orchestrator, the store and the model client.
Records logged outside a turn show ``-`` in those columns.
"""

import sys
from pathlib import Path

from loguru import logger

from scholarsync.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> | turn={extra[turn_id]} project={extra[project_id]} "
    "- <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]} | "
    "turn={extra[turn_id]} project={extra[project_id]} - {message}"
)

DEFAULT_EXTRA = {"module": "scholarsync", "turn_id": "-", "project_id": "-"}


def setup_logging(config: LoggingConfig | None = None) -> None:
    """
    Replace the default loguru handler with the ScholarSync sinks.

    Args:
        config: Logging section of the app config (defaults if omitted)
    """
    config = config or LoggingConfig()

    logger.remove()
    logger.configure(extra=DEFAULT_EXTRA)

    logger.add(sys.stderr, level=config.level, format=CONSOLE_FORMAT, colorize=True)

    if config.log_to_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # One JSON record per line when serialized; extra carries the turn context
        logger.add(
            log_path / "scholarsync_{time:YYYY-MM-DD}.log",
            level=config.level,
            format=FILE_FORMAT,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression=config.compression,
            serialize=config.serialize,
            enqueue=True,
        )


def get_logger(name: str):
    """Get a logger bound to a module name."""
    return logger.bind(module=name)
