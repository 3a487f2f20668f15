"""Environment-driven configuration for the changelog tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .persistence import DOCUMENT_FILE_NAME
from .runtime import NOT_FOUND_TEXT

DEFAULT_DOCUMENT_PATH = Path("Assets") / "Resources" / DOCUMENT_FILE_NAME
DEFAULT_REPORT_PLATFORM = "android"
DEFAULT_APP_VERSION = "0.0.0"


def _normalise_path(value: str | None) -> Path | None:
    if value is None:
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    return Path(trimmed).expanduser()


def _normalise_string(value: str | None, *, default: str) -> str:
    if value is None:
        return default

    trimmed = value.strip()
    return trimmed or default


@dataclass(frozen=True)
class ChangelogSettings:
    """Settings shared by the CLI, the editor API and the build hook.

    Values are read from environment variables; empty strings are treated as
    if the variable was unset.
    """

    document_path: Path = DEFAULT_DOCUMENT_PATH
    report_platform: str = DEFAULT_REPORT_PLATFORM
    not_found_text: str = NOT_FOUND_TEXT
    app_version: str = DEFAULT_APP_VERSION

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ChangelogSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.
        """

        source = environ if environ is not None else os.environ

        document_path = _normalise_path(source.get("SCENECHANGELOG_DOCUMENT_PATH"))
        report_platform = _normalise_string(
            source.get("SCENECHANGELOG_REPORT_PLATFORM"),
            default=DEFAULT_REPORT_PLATFORM,
        )
        # Not stripped: leading or trailing spaces may be intentional display text.
        not_found_text = source.get("SCENECHANGELOG_NOT_FOUND_TEXT") or NOT_FOUND_TEXT
        app_version = _normalise_string(
            source.get("SCENECHANGELOG_APP_VERSION"),
            default=DEFAULT_APP_VERSION,
        )

        return cls(
            document_path=document_path or DEFAULT_DOCUMENT_PATH,
            report_platform=report_platform,
            not_found_text=not_found_text,
            app_version=app_version,
        )


__all__ = [
    "ChangelogSettings",
    "DEFAULT_APP_VERSION",
    "DEFAULT_DOCUMENT_PATH",
    "DEFAULT_REPORT_PLATFORM",
]
