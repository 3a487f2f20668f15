"""JSON persistence for the changelog document."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from .models import (
    DEFAULT_BUILD_VERSION,
    DEFAULT_BUNDLE_VERSION_CODE,
    BuildMetadata,
    ChangelogDocument,
    ChangelogEntry,
    SceneRecord,
)
from .versioning import coerce_scene_version

LOG = logging.getLogger(__name__)

DOCUMENT_FILE_NAME = "ChangelogInfo.json"

# Multi-line text is stored as a single JSON string with real newlines
# replaced by this two-character marker.
ESCAPED_NEWLINE = "\\n"


class ChangelogError(Exception):
    """Base class for errors raised by the changelog tooling."""


class DocumentFormatError(ChangelogError, ValueError):
    """Raised when stored data does not describe a changelog document."""


class DocumentStoreError(ChangelogError, RuntimeError):
    """Raised when the document cannot be read from or written to storage."""


def escape_newlines(text: str) -> str:
    """Replace real newlines with the literal ``\\n`` marker."""

    return text.replace("\n", ESCAPED_NEWLINE)


def unescape_newlines(text: str) -> str:
    """Replace the literal ``\\n`` marker with real newlines."""

    return text.replace(ESCAPED_NEWLINE, "\n")


def document_to_payload(document: ChangelogDocument) -> Dict[str, Any]:
    """Return the storage representation of ``document``.

    Text fields that may span several lines are escaped so the payload can be
    written as-is.
    """

    return {
        "Scenes": [
            {
                "SceneName": scene.name,
                "SceneVersion": float(scene.version),
                "SceneDescription": escape_newlines(scene.description),
                "SceneChangelog": [
                    {
                        "ChangelogVersion": entry.version,
                        "ChangelogDescription": escape_newlines(entry.description),
                    }
                    for entry in scene.changelog
                ],
            }
            for scene in document.scenes
        ],
        "BuildVersion": document.build.build_version,
        "BundleVersionCode": document.build.bundle_version_code,
    }


def document_from_payload(payload: object) -> ChangelogDocument:
    """Build a document from its stored representation.

    Missing keys fall back to the model defaults and escaped newlines in
    descriptions are restored.

    Raises:
        DocumentFormatError: If ``payload`` does not have the document shape.
    """

    if not isinstance(payload, Mapping):
        raise DocumentFormatError("Changelog document must be a JSON object")

    build_version = payload.get("BuildVersion", DEFAULT_BUILD_VERSION)
    if build_version is None:
        build_version = DEFAULT_BUILD_VERSION
    if not isinstance(build_version, str):
        raise DocumentFormatError("BuildVersion must be a string")

    bundle_version_code = payload.get("BundleVersionCode", DEFAULT_BUNDLE_VERSION_CODE)
    if isinstance(bundle_version_code, bool) or not isinstance(
        bundle_version_code, int
    ):
        raise DocumentFormatError("BundleVersionCode must be an integer")

    scenes = [
        _scene_from_payload(entry)
        for entry in _sequence(payload.get("Scenes"), "Scenes")
    ]

    return ChangelogDocument(
        build=BuildMetadata(
            build_version=build_version,
            bundle_version_code=bundle_version_code,
        ),
        scenes=scenes,
    )


def encode(document: ChangelogDocument) -> bytes:
    """Serialise ``document`` to pretty-printed JSON bytes.

    The document passed in is left untouched; escaping happens on a copy.
    """

    payload = document_to_payload(document.clone())
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def decode(data: bytes | str) -> ChangelogDocument:
    """Parse stored JSON into a :class:`ChangelogDocument`.

    Raises:
        DocumentFormatError: If ``data`` is not valid JSON or has the wrong shape.
    """

    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DocumentFormatError("Changelog document is not UTF-8") from exc
    else:
        text = data

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentFormatError(f"Changelog document is not valid JSON: {exc}") from exc

    return document_from_payload(payload)


class DocumentStore(ABC):
    """Interface describing where the changelog document lives."""

    @abstractmethod
    def exists(self) -> bool:
        """Return ``True`` when a stored document is available."""

    @abstractmethod
    def read_bytes(self) -> bytes:
        """Return the raw stored document.

        Raises:
            FileNotFoundError: If nothing has been stored yet.
        """

    @abstractmethod
    def write_bytes(self, data: bytes) -> None:
        """Replace the stored document with ``data`` as a whole."""

    def load(self) -> ChangelogDocument:
        """Return the stored document, or an empty one if none exists."""

        if not self.exists():
            return ChangelogDocument()
        return decode(self.read_bytes())

    def save(self, document: ChangelogDocument) -> None:
        """Encode ``document`` and overwrite the stored copy."""

        self.write_bytes(encode(document))


class InMemoryDocumentStore(DocumentStore):
    """Keep the encoded document in local process memory."""

    def __init__(self, data: bytes | None = None) -> None:
        self._data = data

    @property
    def data(self) -> bytes | None:
        return self._data

    def exists(self) -> bool:
        return self._data is not None

    def read_bytes(self) -> bytes:
        if self._data is None:
            raise FileNotFoundError("No changelog document has been stored")
        return self._data

    def write_bytes(self, data: bytes) -> None:
        self._data = bytes(data)


class FileDocumentStore(DocumentStore):
    """Persist the changelog document as a JSON file on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileDocumentStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise DocumentStoreError(
                f"Failed to read changelog document {self.path}: {exc}"
            ) from exc

    def write_bytes(self, data: bytes) -> None:
        destination = self.path
        temporary = destination.with_suffix(destination.suffix + ".tmp")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            temporary.write_bytes(data)
            temporary.replace(destination)
        except OSError as exc:
            raise DocumentStoreError(
                f"Failed to write changelog document {destination}: {exc}"
            ) from exc

    def save(self, document: ChangelogDocument) -> None:
        super().save(document)
        LOG.info("Changelog info saved to %s", self.path)


def _sequence(value: object, field_name: str) -> List[object]:
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise DocumentFormatError(f"{field_name} must be a list")
    return list(value)


def _text(value: object, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DocumentFormatError(f"{field_name} must be a string")
    return value


def _scene_from_payload(payload: object) -> SceneRecord:
    if not isinstance(payload, Mapping):
        raise DocumentFormatError("Scene entries must be JSON objects")

    version = payload.get("SceneVersion", 0)
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        raise DocumentFormatError("SceneVersion must be a number")
    try:
        scene_version = coerce_scene_version(version)
    except ValueError as exc:
        raise DocumentFormatError(f"SceneVersion must be finite: {exc}") from exc

    changelog: List[ChangelogEntry] = []
    for entry in _sequence(payload.get("SceneChangelog"), "SceneChangelog"):
        if not isinstance(entry, Mapping):
            raise DocumentFormatError("Changelog entries must be JSON objects")
        changelog.append(
            ChangelogEntry(
                version=_text(entry.get("ChangelogVersion"), "ChangelogVersion"),
                description=unescape_newlines(
                    _text(entry.get("ChangelogDescription"), "ChangelogDescription")
                ),
            )
        )

    return SceneRecord(
        name=_text(payload.get("SceneName"), "SceneName"),
        version=scene_version,
        description=unescape_newlines(
            _text(payload.get("SceneDescription"), "SceneDescription")
        ),
        changelog=changelog,
    )


__all__ = [
    "ChangelogError",
    "DocumentFormatError",
    "DocumentStore",
    "DocumentStoreError",
    "DOCUMENT_FILE_NAME",
    "ESCAPED_NEWLINE",
    "FileDocumentStore",
    "InMemoryDocumentStore",
    "decode",
    "document_from_payload",
    "document_to_payload",
    "encode",
    "escape_newlines",
    "unescape_newlines",
]
