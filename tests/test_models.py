"""Unit tests for the :mod:`scenechangelog.models` module."""

from decimal import Decimal

from scenechangelog import ChangelogDocument, ChangelogEntry, SceneRecord


def test_scene_record_coerces_version_to_decimal() -> None:
    scene = SceneRecord(name="Hub", version=1.3)  # type: ignore[arg-type]

    assert scene.version == Decimal("1.3")


def test_latest_entry() -> None:
    scene = SceneRecord(name="Hub")
    assert scene.latest_entry is None

    scene.changelog.append(ChangelogEntry(version="1.1", description="first"))
    scene.changelog.append(ChangelogEntry(version="1.2", description="second"))

    assert scene.latest_entry == ChangelogEntry(version="1.2", description="second")


def test_clone_is_deep(sample_document: ChangelogDocument) -> None:
    clone = sample_document.clone()

    assert clone == sample_document
    clone.scenes[0].changelog[0].description = "changed"
    clone.scenes.append(SceneRecord())
    clone.build.bundle_version_code = 99

    assert sample_document.scenes[0].changelog[0].description == "Opened the gate"
    assert len(sample_document.scenes) == 2
    assert sample_document.build.bundle_version_code == 7
