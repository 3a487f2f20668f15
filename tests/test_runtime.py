"""Tests for the runtime scene lookup used by the in-game info panel."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import pytest

from scenechangelog import (
    ChangelogDocument,
    FileDocumentStore,
    InMemoryDocumentStore,
    SceneRecord,
    changelog_text,
    describe_scene,
    find_scene,
    load_runtime_document,
)


def test_find_scene_returns_exact_match(sample_document: ChangelogDocument) -> None:
    scene = find_scene(sample_document, "Level1")

    assert scene is sample_document.scenes[0]


def test_find_scene_is_case_sensitive(sample_document: ChangelogDocument) -> None:
    assert find_scene(sample_document, "level1") is None
    assert find_scene(sample_document, "Level") is None
    assert find_scene(None, "Level1") is None


def test_find_scene_returns_first_duplicate(sample_document: ChangelogDocument) -> None:
    duplicate = SceneRecord(name="Level1", version=Decimal("9.9"))
    sample_document.scenes.append(duplicate)

    assert find_scene(sample_document, "Level1") is sample_document.scenes[0]


def test_changelog_text_shows_only_latest_entry(
    sample_document: ChangelogDocument,
) -> None:
    assert changelog_text(sample_document.scenes[0]) == "Lighting a|b tweaks\nFixed bug"
    assert changelog_text(sample_document.scenes[1]) == "No changelog entries."


def test_describe_scene_found(sample_document: ChangelogDocument) -> None:
    display = describe_scene(sample_document, "Level1", app_version="0.9.3")

    assert display.found is True
    assert display.build_version_text == "AppVersion: 0.9.3 BundleVersionCode: 7"
    assert display.scene_name == "Level1"
    assert display.scene_version == "1.2"
    assert display.scene_description == "Forest clearing.\nNow with fog."
    assert display.changelog == "Lighting a|b tweaks\nFixed bug"


def test_describe_scene_missing_uses_fallback_text(
    sample_document: ChangelogDocument, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        display = describe_scene(
            sample_document,
            "Credits",
            app_version="0.9.3",
            not_found_text="N/A",
        )

    assert display.found is False
    assert display.scene_name == "Credits"
    assert display.scene_version == "N/A"
    assert display.scene_description == "N/A"
    assert display.changelog == "N/A"
    assert "No info found for scene: Credits" in caplog.text


def test_describe_scene_without_document() -> None:
    display = describe_scene(None, "Level1", app_version="1.0")

    assert display.found is False
    assert display.build_version_text is None
    assert display.scene_version == "Information not available"


def test_load_runtime_document_reads_file(
    file_store: FileDocumentStore, sample_document: ChangelogDocument
) -> None:
    assert load_runtime_document(file_store) == sample_document


def test_load_runtime_document_missing_file(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        document = load_runtime_document(FileDocumentStore(tmp_path / "none.json"))

    assert document is None
    assert "Scene info file not found" in caplog.text


def test_load_runtime_document_corrupt_file(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR):
        document = load_runtime_document(InMemoryDocumentStore(b"{"))

    assert document is None
    assert "Error loading scene info" in caplog.text


def test_load_runtime_document_oversized_scene_version(
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = InMemoryDocumentStore(
        b'{"Scenes": [{"SceneName": "A", "SceneVersion": 1e30}]}'
    )

    with caplog.at_level(logging.ERROR):
        document = load_runtime_document(store)

    assert document is None
    assert "Error loading scene info" in caplog.text
