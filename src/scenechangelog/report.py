"""Markdown report describing every scene and its changelog."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List

from .models import ChangelogDocument, SceneRecord
from .persistence import ChangelogError, DocumentStore
from .versioning import format_scene_version

LOG = logging.getLogger(__name__)

REPORT_TITLE = "# Scene Information"
REPORT_SUFFIX = "_SceneInfo.md"
NO_SCENES_TEXT = "No scene information available."
NO_DESCRIPTION_TEXT = "No description available."
NO_CHANGELOG_TEXT = "No changelog entries available."
NO_ENTRY_DESCRIPTION_TEXT = "No description."
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def escape_table_cell(text: str) -> str:
    """Escape pipe characters so ``text`` cannot split a table row."""

    return text.replace("|", "\\|")


def _render_scene(scene: SceneRecord) -> List[str]:
    lines = [
        f"## {scene.name}",
        f"**Version:** {format_scene_version(scene.version)}",
        "",
        "### Description",
        scene.description if scene.description.strip() else NO_DESCRIPTION_TEXT,
        "",
        "### Changelog",
    ]

    if scene.changelog:
        lines.append("| Version | Description |")
        lines.append("|---------|-------------|")
        for entry in scene.changelog:
            description = (
                escape_table_cell(entry.description)
                if entry.description.strip()
                else NO_ENTRY_DESCRIPTION_TEXT
            )
            lines.append(f"| {entry.version} | {description} |")
    else:
        lines.append(NO_CHANGELOG_TEXT)

    lines.extend(["", "---", ""])
    return lines


def render_report(
    document: ChangelogDocument, *, generated_at: datetime | None = None
) -> str:
    """Render ``document`` as Markdown.

    Scenes and changelog entries appear in stored order. ``generated_at``
    defaults to the current local time.
    """

    timestamp = generated_at or datetime.now()
    lines = [
        REPORT_TITLE,
        f"**Build Version:** {document.build.build_version}",
        f"**BundleVersionCode:** {document.build.bundle_version_code}",
        "",
        "---",
        "",
    ]

    if document.scenes:
        for scene in document.scenes:
            lines.extend(_render_scene(scene))
    else:
        lines.append(NO_SCENES_TEXT)

    lines.append(f"*Generated on: {timestamp.strftime(TIMESTAMP_FORMAT)}*")
    return "\n".join(lines) + "\n"


def report_path_for(package_path: Path | str) -> Path:
    """Return the report location next to a built application package."""

    package = Path(package_path)
    return package.parent / f"{package.stem}{REPORT_SUFFIX}"


def write_report(
    store: DocumentStore,
    package_path: Path | str,
    *,
    generated_at: datetime | None = None,
) -> Path | None:
    """Write the Markdown report beside ``package_path``.

    Failures are logged rather than raised so a build is never aborted.

    Returns:
        The report path, or ``None`` when nothing was written.
    """

    if not store.exists():
        LOG.warning("Changelog document not found. Markdown file will not be generated.")
        return None

    output_path = report_path_for(package_path)
    try:
        document = store.load()
        content = render_report(document, generated_at=generated_at)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    except (ChangelogError, OSError) as exc:
        LOG.error("Error generating Markdown file: %s", exc)
        return None

    LOG.info("Changelog info Markdown file generated at: %s", output_path)
    return output_path


__all__ = [
    "NO_CHANGELOG_TEXT",
    "NO_DESCRIPTION_TEXT",
    "NO_ENTRY_DESCRIPTION_TEXT",
    "NO_SCENES_TEXT",
    "REPORT_SUFFIX",
    "escape_table_cell",
    "render_report",
    "report_path_for",
    "write_report",
]
