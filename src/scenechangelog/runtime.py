"""Runtime lookup of scene information for on-screen display."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import ChangelogDocument, SceneRecord
from .persistence import ChangelogError, DocumentStore
from .versioning import format_scene_version

LOG = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Information not available"
NO_CHANGELOG_ENTRIES_TEXT = "No changelog entries."


@dataclass(frozen=True)
class SceneInfoDisplay:
    """Strings destined for the display text fields of a scene."""

    build_version_text: str | None
    scene_name: str
    scene_version: str
    scene_description: str
    changelog: str
    found: bool


def find_scene(document: ChangelogDocument | None, name: str) -> SceneRecord | None:
    """Return the first scene whose name exactly matches ``name``."""

    if document is None:
        return None
    for scene in document.scenes:
        if scene.name == name:
            return scene
    return None


def changelog_text(scene: SceneRecord) -> str:
    """Return the description of the latest changelog entry of ``scene``."""

    latest = scene.latest_entry
    if latest is None:
        return NO_CHANGELOG_ENTRIES_TEXT
    return latest.description


def build_version_text(document: ChangelogDocument, app_version: str) -> str:
    return (
        f"AppVersion: {app_version} "
        f"BundleVersionCode: {document.build.bundle_version_code}"
    )


def load_runtime_document(store: DocumentStore) -> ChangelogDocument | None:
    """Read the document for display, or ``None`` if it is unavailable."""

    if not store.exists():
        LOG.warning("Scene info file not found: %s", store)
        return None

    try:
        document = store.load()
    except (ChangelogError, OSError) as exc:
        LOG.error("Error loading scene info: %s", exc)
        return None

    LOG.debug("Successfully loaded scene info")
    return document


def describe_scene(
    document: ChangelogDocument | None,
    scene_name: str,
    *,
    app_version: str,
    not_found_text: str = NOT_FOUND_TEXT,
) -> SceneInfoDisplay:
    """Return the display strings for ``scene_name``.

    When the scene is missing, the name is shown as queried and every other
    field shows ``not_found_text``.
    """

    version_text = (
        build_version_text(document, app_version) if document is not None else None
    )
    scene = find_scene(document, scene_name)
    if scene is None:
        LOG.warning("No info found for scene: %s", scene_name)
        return SceneInfoDisplay(
            build_version_text=version_text,
            scene_name=scene_name,
            scene_version=not_found_text,
            scene_description=not_found_text,
            changelog=not_found_text,
            found=False,
        )

    LOG.debug("Displayed info for scene: %s", scene.name)
    return SceneInfoDisplay(
        build_version_text=version_text,
        scene_name=scene.name,
        scene_version=format_scene_version(scene.version),
        scene_description=scene.description,
        changelog=changelog_text(scene),
        found=True,
    )


__all__ = [
    "NOT_FOUND_TEXT",
    "NO_CHANGELOG_ENTRIES_TEXT",
    "SceneInfoDisplay",
    "build_version_text",
    "changelog_text",
    "describe_scene",
    "find_scene",
    "load_runtime_document",
]
