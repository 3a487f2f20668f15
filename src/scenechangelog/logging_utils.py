"""Logging setup for the changelog CLI and editor server."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def coerce_level(value: str | int | None) -> int:
    """Return a logging level derived from ``value``.

    Accepts standard level names (case insensitive) or a numeric level.
    Anything else falls back to :data:`logging.INFO`.
    """

    if value is None:
        return logging.INFO

    if isinstance(value, int):
        return value

    candidate = value.strip()
    if not candidate:
        return logging.INFO

    if candidate.isdigit():
        return int(candidate)

    resolved = logging.getLevelName(candidate.upper())
    if isinstance(resolved, int):
        return resolved

    return logging.INFO


def configure_logging(
    *,
    level: str | int | None = None,
    environ: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> int:
    """Configure the root logger and return the effective level.

    ``level`` overrides the ``LOG_LEVEL`` environment variable. Extra keyword
    arguments are forwarded to :func:`logging.basicConfig`.
    """

    source = environ if environ is not None else os.environ
    effective_level = coerce_level(level if level is not None else source.get("LOG_LEVEL"))

    logging.basicConfig(
        level=effective_level,
        format=kwargs.pop("format", _DEFAULT_FORMAT),
        datefmt=kwargs.pop("datefmt", _DEFAULT_DATEFMT),
        force=kwargs.pop("force", True),
        **kwargs,
    )

    return effective_level


__all__ = ["coerce_level", "configure_logging"]
