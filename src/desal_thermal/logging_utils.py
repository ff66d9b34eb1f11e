from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(levelname)s:%(name)s:%(message)s"
LOG_LEVEL_ENV = "DESAL_THERMAL_LOG_LEVEL"


def _level_from_env(default: int = logging.INFO) -> int:
    raw = os.environ.get(LOG_LEVEL_ENV)
    if not raw:
        return default
    if raw.strip().isdigit():
        return int(raw)
    level = logging.getLevelName(raw.strip().upper())
    if isinstance(level, int):
        return level
    logging.getLogger(__name__).warning("Ignoring unknown %s=%r", LOG_LEVEL_ENV, raw)
    return default


def configure_logging(
    level: int | None = None,
    *,
    format: str = DEFAULT_FORMAT,
    force: bool | None = None,
) -> None:
    """Configure root logging once.

    Call from scripts/notebooks before running the calculators. When `level` is None the
    level is read from ``DESAL_THERMAL_LOG_LEVEL`` (name or number) and defaults to INFO.
    `force` is forwarded to ``logging.basicConfig`` to allow reconfiguration when running
    interactively.
    """

    kwargs: dict[str, object] = {
        "level": _level_from_env() if level is None else level,
        "format": format,
    }
    if force is not None:
        kwargs["force"] = force
    logging.basicConfig(**kwargs)


__all__ = ["configure_logging", "DEFAULT_FORMAT", "LOG_LEVEL_ENV"]
