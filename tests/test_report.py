from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from scenechangelog import (
    ChangelogDocument,
    FileDocumentStore,
    InMemoryDocumentStore,
    render_report,
    report_path_for,
    write_report,
)
from scenechangelog.persistence import DocumentStore

GENERATED_AT = datetime(2024, 5, 17, 14, 3, 9)


def test_render_report_for_empty_document() -> None:
    report = render_report(ChangelogDocument(), generated_at=GENERATED_AT)

    assert report == (
        "# Scene Information\n"
        "**Build Version:** 1.0.001\n"
        "**BundleVersionCode:** 1\n"
        "\n"
        "---\n"
        "\n"
        "No scene information available.\n"
        "*Generated on: 2024-05-17 14:03:09*\n"
    )


def test_render_report_lists_scenes_in_order(sample_document: ChangelogDocument) -> None:
    report = render_report(sample_document, generated_at=GENERATED_AT)

    expected = (
        "# Scene Information\n"
        "**Build Version:** 1.0.009\n"
        "**BundleVersionCode:** 7\n"
        "\n"
        "---\n"
        "\n"
        "## Level1\n"
        "**Version:** 1.2\n"
        "\n"
        "### Description\n"
        "Forest clearing.\n"
        "Now with fog.\n"
        "\n"
        "### Changelog\n"
        "| Version | Description |\n"
        "|---------|-------------|\n"
        "| 1.1 | Opened the gate |\n"
        "| 1.2 | Lighting a\\|b tweaks\n"
        "Fixed bug |\n"
        "\n"
        "---\n"
        "\n"
        "## Level2\n"
        "**Version:** 1.9\n"
        "\n"
        "### Description\n"
        "Cave system\n"
        "\n"
        "### Changelog\n"
        "No changelog entries available.\n"
        "\n"
        "---\n"
        "\n"
        "*Generated on: 2024-05-17 14:03:09*\n"
    )
    assert report == expected


def test_render_report_escapes_pipes_in_table_cells(
    sample_document: ChangelogDocument,
) -> None:
    sample_document.scenes[0].changelog[0].description = "a|b"

    report = render_report(sample_document, generated_at=GENERATED_AT)

    assert "| 1.1 | a\\|b |" in report


def test_render_report_falls_back_for_blank_text(
    sample_document: ChangelogDocument,
) -> None:
    sample_document.scenes[0].description = "   "
    sample_document.scenes[0].changelog[0].description = ""

    report = render_report(sample_document, generated_at=GENERATED_AT)

    assert "### Description\nNo description available.\n" in report
    assert "| 1.1 | No description. |" in report


def test_report_path_for_sits_beside_the_package(tmp_path: Path) -> None:
    package = tmp_path / "builds" / "MyGame-v3.apk"

    assert report_path_for(package) == tmp_path / "builds" / "MyGame-v3_SceneInfo.md"


def test_write_report_creates_markdown_file(
    file_store: FileDocumentStore, tmp_path: Path
) -> None:
    package = tmp_path / "out" / "Game.apk"

    report_path = write_report(file_store, package, generated_at=GENERATED_AT)

    assert report_path == tmp_path / "out" / "Game_SceneInfo.md"
    content = report_path.read_text(encoding="utf-8")
    assert content.startswith("# Scene Information\n**Build Version:** 1.0.009\n")
    assert content.endswith("*Generated on: 2024-05-17 14:03:09*\n")


def test_write_report_skips_when_document_missing(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    store = FileDocumentStore(tmp_path / "missing.json")

    with caplog.at_level(logging.WARNING):
        result = write_report(store, tmp_path / "Game.apk")

    assert result is None
    assert not (tmp_path / "Game_SceneInfo.md").exists()
    assert "Markdown file will not be generated" in caplog.text


def test_write_report_logs_and_swallows_format_errors(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    store = InMemoryDocumentStore(b"{broken")

    with caplog.at_level(logging.ERROR):
        result = write_report(store, tmp_path / "Game.apk")

    assert result is None
    assert "Error generating Markdown file" in caplog.text


class _UnreadableStore(DocumentStore):
    def exists(self) -> bool:
        return True

    def read_bytes(self) -> bytes:
        raise PermissionError("access denied")

    def write_bytes(self, data: bytes) -> None:  # pragma: no cover - unused
        raise AssertionError("report generation must not write the document")


def test_write_report_logs_io_errors(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR):
        result = write_report(_UnreadableStore(), tmp_path / "Game.apk")

    assert result is None
    assert "access denied" in caplog.text
