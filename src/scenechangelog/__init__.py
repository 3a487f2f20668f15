"""Per-scene version and changelog tooling for game builds."""

from .build import BuildContext, preprocess_build, record_bundle_version_code
from .editor import ChangelogEditor
from .logging_utils import configure_logging
from .models import BuildMetadata, ChangelogDocument, ChangelogEntry, SceneRecord
from .persistence import (
    ChangelogError,
    DocumentFormatError,
    DocumentStore,
    DocumentStoreError,
    FileDocumentStore,
    InMemoryDocumentStore,
    decode,
    encode,
)
from .report import render_report, report_path_for, write_report
from .runtime import (
    SceneInfoDisplay,
    changelog_text,
    describe_scene,
    find_scene,
    load_runtime_document,
)
from .settings import ChangelogSettings
from .versioning import (
    format_scene_version,
    is_valid_build_version,
    next_build_patch,
    next_scene_version,
    normalise_build_version,
    truncate_scene_version,
)

__all__ = [
    "BuildMetadata",
    "ChangelogDocument",
    "ChangelogEntry",
    "SceneRecord",
    "ChangelogError",
    "DocumentFormatError",
    "DocumentStoreError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "FileDocumentStore",
    "decode",
    "encode",
    "ChangelogEditor",
    "render_report",
    "report_path_for",
    "write_report",
    "BuildContext",
    "preprocess_build",
    "record_bundle_version_code",
    "SceneInfoDisplay",
    "changelog_text",
    "describe_scene",
    "find_scene",
    "load_runtime_document",
    "ChangelogSettings",
    "configure_logging",
    "format_scene_version",
    "is_valid_build_version",
    "next_build_patch",
    "next_scene_version",
    "normalise_build_version",
    "truncate_scene_version",
]
