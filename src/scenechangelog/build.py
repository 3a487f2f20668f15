"""Build-time hook that stamps the bundle version code and writes the report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .persistence import ChangelogError, DocumentStore
from .report import write_report

LOG = logging.getLogger(__name__)

ANDROID_PLATFORM = "android"


@dataclass(frozen=True)
class BuildContext:
    """Values supplied by the build pipeline once per build."""

    platform: str
    output_path: Path
    bundle_version_code: int

    def targets(self, platform: str) -> bool:
        """Return ``True`` when this build is for ``platform`` (case-insensitive)."""

        return self.platform.strip().lower() == platform.strip().lower()


def record_bundle_version_code(store: DocumentStore, bundle_version_code: int) -> bool:
    """Write ``bundle_version_code`` into the stored document.

    The build version is left alone; this is not an editor save.

    Returns:
        ``True`` when the stored document was updated.
    """

    if not store.exists():
        return False

    try:
        document = store.load()
        document.build.bundle_version_code = bundle_version_code
        store.save(document)
    except ChangelogError as exc:
        LOG.error("Could not record bundle version code: %s", exc)
        return False
    return True


def preprocess_build(
    context: BuildContext,
    store: DocumentStore,
    *,
    generated_at: datetime | None = None,
    report_platform: str = ANDROID_PLATFORM,
) -> Path | None:
    """Run the pre-build step for ``context``.

    Only builds for ``report_platform`` (Android by default) are handled. The
    bundle version code is recorded first so the generated report reflects it.

    Returns:
        The path of the generated Markdown report, if one was written.
    """

    if not context.targets(report_platform):
        LOG.debug("Skipping changelog report for platform %s", context.platform)
        return None

    record_bundle_version_code(store, context.bundle_version_code)
    return write_report(store, context.output_path, generated_at=generated_at)


__all__ = [
    "ANDROID_PLATFORM",
    "BuildContext",
    "preprocess_build",
    "record_bundle_version_code",
]
