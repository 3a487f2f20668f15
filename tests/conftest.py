"""Test configuration for the scene changelog project."""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest

from scenechangelog import (
    BuildMetadata,
    ChangelogDocument,
    ChangelogEntry,
    FileDocumentStore,
    InMemoryDocumentStore,
    SceneRecord,
)


def build_sample_document() -> ChangelogDocument:
    """Return a small document exercising multi-line text and pipes."""

    return ChangelogDocument(
        build=BuildMetadata(build_version="1.0.009", bundle_version_code=7),
        scenes=[
            SceneRecord(
                name="Level1",
                version=Decimal("1.2"),
                description="Forest clearing.\nNow with fog.",
                changelog=[
                    ChangelogEntry(version="1.1", description="Opened the gate"),
                    ChangelogEntry(
                        version="1.2", description="Lighting a|b tweaks\nFixed bug"
                    ),
                ],
            ),
            SceneRecord(
                name="Level2",
                version=Decimal("1.9"),
                description="Cave system",
            ),
        ],
    )


@pytest.fixture()
def sample_document() -> ChangelogDocument:
    return build_sample_document()


@pytest.fixture()
def memory_store(sample_document: ChangelogDocument) -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.save(sample_document)
    return store


@pytest.fixture()
def document_path(tmp_path: Path) -> Path:
    return tmp_path / "Assets" / "Resources" / "ChangelogInfo.json"


@pytest.fixture()
def file_store(
    document_path: Path, sample_document: ChangelogDocument
) -> FileDocumentStore:
    store = FileDocumentStore(document_path)
    store.save(sample_document)
    return store


__all__ = ["build_sample_document"]
