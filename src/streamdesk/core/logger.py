"""Named loggers shared by the session, channel and app."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LOGGERS: dict[str, logging.Logger] = {}
_SETTINGS: dict[str, object] = {"level": logging.INFO, "log_dir": None}


def configure_logging(*, level: str | int = "INFO", log_dir: str | Path | None = None) -> None:
    """Set level and optional file directory for loggers created afterwards.

    Existing loggers keep their handlers but pick up the new level.
    """
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else int(level)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    _SETTINGS["level"] = resolved
    _SETTINGS["log_dir"] = Path(log_dir) if log_dir else None
    for logger in _LOGGERS.values():
        logger.setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    """Create or retrieve a `streamdesk.<name>` logger."""
    if name in _LOGGERS:
        return _LOGGERS[name]

    logger = logging.getLogger(f"streamdesk.{name}")
    logger.setLevel(int(_SETTINGS["level"]))  # type: ignore[arg-type]
    formatter = logging.Formatter(_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_dir = _SETTINGS["log_dir"]
    if isinstance(log_dir, Path):
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        file_handler = logging.FileHandler(log_dir / f"streamdesk-{timestamp}.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[name] = logger
    return logger
