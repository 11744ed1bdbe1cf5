from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    raw_norm = raw.strip().lower()
    if raw_norm in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if raw_norm in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _env_list(name: str) -> tuple[str, ...]:
    raw = _env(name)
    if raw is None:
        return ()
    return tuple(part for part in raw.split(os.pathsep) if part.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    log_level: str = "WARNING"
    progress: bool = True
    extra_excludes: tuple[str, ...] = ()


def load_settings() -> Settings:
    """Read TREE_MANIFEST_* environment variables."""

    return Settings(
        log_level=(_env("TREE_MANIFEST_LOG_LEVEL", "WARNING") or "WARNING").strip().upper(),
        progress=_env_bool("TREE_MANIFEST_PROGRESS", True),
        extra_excludes=_env_list("TREE_MANIFEST_EXCLUDE"),
    )


def setup_logging(level: str, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger."""

    logger = logging.getLogger("tree_manifest")
    resolved = logging.getLevelName(level)
    logger.setLevel(resolved if isinstance(resolved, int) else logging.WARNING)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)
    return logger


__all__ = ["LOG_FORMAT", "Settings", "load_settings", "setup_logging"]
