"""Command-line entry point for the scene changelog manager."""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, Mapping, Sequence

from scenechangelog import (
    BuildContext,
    ChangelogDocument,
    ChangelogEditor,
    ChangelogError,
    ChangelogSettings,
    FileDocumentStore,
    configure_logging,
    describe_scene,
    format_scene_version,
    load_runtime_document,
    preprocess_build,
    render_report,
)

LOG = logging.getLogger(__name__)


class EditorLaunchError(RuntimeError):
    """Raised when the editor API server cannot be controlled."""


def _format_host_for_url(host: str) -> str:
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


class EditorLauncher:
    """Run the changelog editor API for one document under ``uvicorn``.

    The server process finds its document through
    ``SCENECHANGELOG_DOCUMENT_PATH``, so the launcher resolves the path once
    and hands it over in the child environment.
    """

    APP_FACTORY = "scenechangelog.api.app:create_app"

    def __init__(
        self,
        document_path: Path,
        *,
        host: str = "127.0.0.1",
        port: int = 8000,
        reload: bool = False,
        log_level: str | None = None,
    ) -> None:
        self.document_path = Path(document_path).resolve()
        self.host = host
        self.port = port
        self.reload = reload
        self.log_level = log_level
        self._process: subprocess.Popen[bytes] | None = None

    def base_url(self) -> str:
        return f"http://{_format_host_for_url(self.host)}:{self.port}"

    def command(self) -> list[str]:
        """Return the ``uvicorn`` command line serving the editor."""

        command = [
            sys.executable,
            "-m",
            "uvicorn",
            self.APP_FACTORY,
            "--factory",
            "--host",
            self.host,
            "--port",
            str(self.port),
        ]
        if self.reload:
            command.append("--reload")
        return command

    def environment(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the child environment pointing the API at the document."""

        env = dict(os.environ if base is None else base)
        env["SCENECHANGELOG_DOCUMENT_PATH"] = str(self.document_path)
        if self.log_level:
            env["LOG_LEVEL"] = self.log_level
        return env

    def is_running(self) -> bool:
        process = self._process
        if process is None:
            return False
        if process.poll() is not None:
            self._process = None
            return False
        return True

    def start(self) -> None:
        """Launch the editor API if it is not already running."""

        if self.is_running():
            raise EditorLaunchError("Changelog editor is already running.")

        LOG.info("Starting changelog editor for %s", self.document_path)
        try:
            process = subprocess.Popen(self.command(), env=self.environment())
        except OSError as exc:  # pragma: no cover - exercising OS failures is hard
            raise EditorLaunchError(f"Failed to launch changelog editor: {exc}") from exc

        # Surface immediate launch failures such as a port already in use.
        time.sleep(0.2)
        if process.poll() is not None:
            exit_code = process.wait()
            raise EditorLaunchError(
                f"Changelog editor exited immediately (exit status {exit_code}). "
                "Check the console output above for details."
            )

        self._process = process

    def serve(self) -> int:
        """Start the editor and block until it exits or Ctrl+C is pressed."""

        self.start()
        print(
            f"Editor API for {self.document_path} at {self.base_url()}/docs "
            "(Ctrl+C to stop)."
        )
        process = self._process
        try:
            return process.wait() if process is not None else 0
        except KeyboardInterrupt:
            self.stop()
            return 0
        finally:
            self._process = None

    def stop(self) -> bool:
        """Terminate the editor process if it is running."""

        process = self._process
        if process is None:
            return False

        self._process = None
        if process.poll() is not None:
            process.wait()
            return False

        try:
            process.terminate()
        except OSError as exc:  # pragma: no cover - difficult to simulate
            raise EditorLaunchError(f"Failed to stop changelog editor: {exc}") from exc

        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait(timeout=5)

        return True


def _confirm(prompt: str, *, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def format_document(document: ChangelogDocument) -> str:
    """Return a plain-text overview of ``document`` for the terminal."""

    lines = [
        f"Build Version: {document.build.build_version}",
        f"BundleVersionCode: {document.build.bundle_version_code}",
    ]
    if not document.scenes:
        lines.append("No scenes yet. Use 'add-scene' to create one.")
        return "\n".join(lines)

    for index, scene in enumerate(document.scenes):
        lines.append("")
        lines.append(
            f"[{index}] Scene: {scene.name} (v{format_scene_version(scene.version)})"
        )
        for description_line in scene.description.splitlines() or [""]:
            lines.append(f"    {description_line}")
        if not scene.changelog:
            lines.append("    No changelog entries yet.")
        for entry_index, entry in enumerate(scene.changelog):
            first, *rest = entry.description.splitlines() or [""]
            lines.append(f"    [{entry_index}] Version {entry.version}: {first}")
            lines.extend(f"        {line}" for line in rest)
    return "\n".join(lines)


def _cmd_show(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    print(format_document(editor.document))


def _cmd_save(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    editor.save()
    print(f"Saved. Build version is now {editor.document.build.build_version}.")


def _cmd_add_scene(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    editor.add_scene()
    print(f"Added scene [{len(editor.document.scenes) - 1}].")


def _cmd_remove_scene(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    scene = editor.scene(args.index)
    if not _confirm(
        f"Are you sure you want to remove the scene info for '{scene.name}'?",
        assume_yes=args.yes,
    ):
        print("Removal cancelled.")
        return
    editor.remove_scene(args.index)
    print(f"Removed scene '{scene.name}'.")


def _cmd_rename_scene(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    scene = editor.rename_scene(args.index, args.name)
    print(f"Scene [{args.index}] renamed to '{scene.name}'.")


def _cmd_describe_scene(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    editor.set_scene_description(args.index, args.text)
    print(f"Updated description of scene [{args.index}].")


def _cmd_set_scene_version(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    scene = editor.edit_scene_version(args.index, args.version)
    print(f"Scene '{scene.name}' is now v{format_scene_version(scene.version)}.")


def _cmd_add_entry(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    entry = editor.add_changelog_entry(args.index)
    print(f"Added changelog entry for version {entry.version}.")


def _cmd_describe_entry(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    entry = editor.set_changelog_description(args.scene, args.entry, args.text)
    print(f"Updated changelog entry {entry.version}.")


def _cmd_remove_entry(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    entry = editor.entry(args.scene, args.entry)
    if not _confirm(
        "Are you sure you want to remove this changelog entry?", assume_yes=args.yes
    ):
        print("Removal cancelled.")
        return
    editor.remove_changelog_entry(args.scene, args.entry)
    print(f"Removed changelog entry {entry.version}.")


def _cmd_set_build_version(args: argparse.Namespace, editor: ChangelogEditor) -> None:
    version = editor.set_build_version(args.version)
    print(f"Build version is now {version}.")


_EDITOR_COMMANDS: dict[str, Callable[[argparse.Namespace, ChangelogEditor], None]] = {
    "show": _cmd_show,
    "save": _cmd_save,
    "add-scene": _cmd_add_scene,
    "remove-scene": _cmd_remove_scene,
    "rename-scene": _cmd_rename_scene,
    "describe-scene": _cmd_describe_scene,
    "set-scene-version": _cmd_set_scene_version,
    "add-entry": _cmd_add_entry,
    "describe-entry": _cmd_describe_entry,
    "remove-entry": _cmd_remove_entry,
    "set-build-version": _cmd_set_build_version,
}


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Maintain per-scene versions and changelogs for a game build."
    )
    parser.add_argument(
        "--document",
        type=Path,
        help=(
            "Path to ChangelogInfo.json. "
            "Defaults to SCENECHANGELOG_DOCUMENT_PATH or Assets/Resources."
        ),
    )
    parser.add_argument(
        "--log-level",
        help="Logging level name or number (defaults to LOG_LEVEL or INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the current document.")
    subparsers.add_parser(
        "save", help="Save the document, advancing the build patch version."
    )
    subparsers.add_parser("add-scene", help="Append a new scene entry.")

    remove_scene = subparsers.add_parser("remove-scene", help="Remove a scene entry.")
    remove_scene.add_argument("index", type=int)
    remove_scene.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt."
    )

    rename_scene = subparsers.add_parser("rename-scene", help="Rename a scene.")
    rename_scene.add_argument("index", type=int)
    rename_scene.add_argument("name")

    describe_scene_parser = subparsers.add_parser(
        "describe-scene", help="Replace a scene description."
    )
    describe_scene_parser.add_argument("index", type=int)
    describe_scene_parser.add_argument("text")

    set_scene_version = subparsers.add_parser(
        "set-scene-version",
        help="Set a scene version (only one decimal place is kept).",
    )
    set_scene_version.add_argument("index", type=int)
    set_scene_version.add_argument("version")

    add_entry = subparsers.add_parser(
        "add-entry", help="Add a changelog entry, advancing the scene version by 0.1."
    )
    add_entry.add_argument("index", type=int)

    describe_entry = subparsers.add_parser(
        "describe-entry", help="Replace a changelog entry description."
    )
    describe_entry.add_argument("scene", type=int)
    describe_entry.add_argument("entry", type=int)
    describe_entry.add_argument("text")

    remove_entry = subparsers.add_parser(
        "remove-entry", help="Remove a changelog entry."
    )
    remove_entry.add_argument("scene", type=int)
    remove_entry.add_argument("entry", type=int)
    remove_entry.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt."
    )

    set_build_version = subparsers.add_parser(
        "set-build-version",
        help="Set the build version (MajorVersion.MinorVersion.PatchVersion).",
    )
    set_build_version.add_argument("version")

    report = subparsers.add_parser("report", help="Render the Markdown report.")
    report.add_argument(
        "--output", type=Path, help="Write the report here instead of stdout."
    )

    build = subparsers.add_parser(
        "build", help="Run the pre-build step for a produced application package."
    )
    build.add_argument("--platform", required=True)
    build.add_argument("--output", type=Path, required=True, dest="package")
    build.add_argument("--bundle-version-code", type=int, required=True)

    display = subparsers.add_parser(
        "display", help="Show the runtime display strings for a scene."
    )
    display.add_argument("scene")
    display.add_argument("--app-version")
    display.add_argument("--not-found-text")

    editor = subparsers.add_parser("editor", help="Serve the editor HTTP API.")
    editor.add_argument("--host", default="127.0.0.1")
    editor.add_argument("--port", type=int, default=8000)
    editor.add_argument("--reload", action="store_true")

    return parser.parse_args(argv)


def _run_editor(args: argparse.Namespace, document_path: Path) -> None:
    launcher = EditorLauncher(
        document_path,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )
    try:
        launcher.serve()
    except EditorLaunchError as exc:
        print(str(exc))
        raise SystemExit(1) from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Run a single changelog command."""

    args = _parse_args(argv)
    configure_logging(level=args.log_level)
    settings = ChangelogSettings.from_env()
    document_path: Path = args.document or settings.document_path
    store = FileDocumentStore(document_path)

    try:
        if args.command == "editor":
            _run_editor(args, document_path)
            return

        if args.command == "report":
            content = render_report(store.load())
            if args.output is None:
                sys.stdout.write(content)
            else:
                args.output.parent.mkdir(parents=True, exist_ok=True)
                args.output.write_text(content, encoding="utf-8")
                print(f"Report written to {args.output}")
            return

        if args.command == "build":
            context = BuildContext(
                platform=args.platform,
                output_path=args.package,
                bundle_version_code=args.bundle_version_code,
            )
            report_path = preprocess_build(
                context, store, report_platform=settings.report_platform
            )
            if report_path is None:
                print("No report generated.")
            else:
                print(f"Report written to {report_path}")
            return

        if args.command == "display":
            display = describe_scene(
                load_runtime_document(store),
                args.scene,
                app_version=args.app_version or settings.app_version,
                not_found_text=args.not_found_text or settings.not_found_text,
            )
            if display.build_version_text is not None:
                print(display.build_version_text)
            print(f"Scene: {display.scene_name}")
            print(f"Version: {display.scene_version}")
            print(f"Description: {display.scene_description}")
            print(f"Changelog: {display.changelog}")
            return

        editor = ChangelogEditor.open(store)
        _EDITOR_COMMANDS[args.command](args, editor)
    except (ChangelogError, OSError) as exc:
        print(f"Changelog command failed: {exc}")
        raise SystemExit(1) from exc
    except (IndexError, ValueError) as exc:
        print(str(exc))
        raise SystemExit(2) from exc


if __name__ == "__main__":
    main()
