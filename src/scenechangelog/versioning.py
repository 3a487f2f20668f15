"""Version arithmetic for build numbers and scene changelog labels."""

from __future__ import annotations

import logging
import re
from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Union

from .models import DEFAULT_BUILD_VERSION

LOG = logging.getLogger(__name__)

SceneVersionLike = Union[Decimal, float, int, str]

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_TENTH = Decimal("0.1")


def is_valid_build_version(version: str) -> bool:
    """Return ``True`` when ``version`` looks like ``MAJOR.MINOR.PATCH``.

    Each of the three dot-separated parts must be an integer literal.
    """

    if not isinstance(version, str):
        return False

    parts = version.split(".")
    if len(parts) != 3:
        return False
    return all(_INTEGER_PATTERN.fullmatch(part) for part in parts)


def normalise_build_version(version: str) -> str:
    """Return ``version`` if it is well formed, otherwise the default version."""

    if is_valid_build_version(version):
        return version

    LOG.warning(
        "Build version should be in format: MajorVersion.MinorVersion.PatchVersion "
        "(got %r); resetting to %s",
        version,
        DEFAULT_BUILD_VERSION,
    )
    return DEFAULT_BUILD_VERSION


def next_build_patch(version: str) -> str:
    """Increment the patch component of ``version``.

    The new patch number is left-padded with zeros up to the width of the
    original patch string, so ``"1.0.009"`` becomes ``"1.0.010"`` while
    ``"1.0.9"`` becomes ``"1.0.10"``. Malformed versions are returned unchanged.
    """

    if not is_valid_build_version(version):
        return version

    major, minor, patch = version.split(".")
    next_patch = str(int(patch) + 1)
    if len(patch) > len(next_patch):
        next_patch = next_patch.zfill(len(patch))
    return f"{major}.{minor}.{next_patch}"


def as_decimal(value: SceneVersionLike) -> Decimal:
    """Convert ``value`` to :class:`~decimal.Decimal` without float artefacts."""

    if isinstance(value, bool):
        raise TypeError("scene version must be numeric, not a boolean")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # ``str`` first so 1.1 becomes Decimal("1.1") rather than its binary value.
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid scene version: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid scene version: {value!r}")
    return result


def _quantize_tenths(value: Decimal, rounding: str) -> Decimal:
    try:
        return value.quantize(_TENTH, rounding=rounding)
    except InvalidOperation as exc:
        raise ValueError(f"Scene version out of range: {value}") from exc


def truncate_scene_version(value: SceneVersionLike) -> Decimal:
    """Keep one fractional digit, discarding the rest (``1.29`` -> ``1.2``)."""

    return _quantize_tenths(as_decimal(value), ROUND_FLOOR)


def coerce_scene_version(value: SceneVersionLike) -> Decimal:
    """Round a stored version to the nearest tenth.

    Stored documents may carry single-precision noise such as
    ``1.100000023841858``; rounding here keeps those values stable.
    """

    return _quantize_tenths(as_decimal(value), ROUND_HALF_EVEN)


def next_scene_version(current: SceneVersionLike) -> Decimal:
    """Return the scene version that follows ``current``.

    The version advances by ``0.1``. A result landing on a whole number is
    skipped to the ``.1`` release of that number, so ``1.9`` becomes ``2.1``.
    """

    candidate = truncate_scene_version(current) + _TENTH
    if (candidate * 10) % 10 == 0:
        candidate = candidate.to_integral_value(rounding=ROUND_FLOOR) + _TENTH
    return _quantize_tenths(candidate, ROUND_FLOOR)


def format_scene_version(value: SceneVersionLike) -> str:
    """Render a scene version with exactly one fractional digit."""

    return f"{as_decimal(value):.1f}"


__all__ = [
    "as_decimal",
    "coerce_scene_version",
    "format_scene_version",
    "is_valid_build_version",
    "next_build_patch",
    "next_scene_version",
    "normalise_build_version",
    "truncate_scene_version",
]
