"""FastAPI application exposing the changelog editor operations."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Callable, TypeVar

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from starlette.responses import PlainTextResponse

from ..editor import ChangelogEditor
from ..models import ChangelogDocument, ChangelogEntry, SceneRecord
from ..persistence import ChangelogError, FileDocumentStore
from ..report import render_report
from ..runtime import describe_scene, load_runtime_document
from ..settings import ChangelogSettings
from ..versioning import format_scene_version

_T = TypeVar("_T")


class ChangelogEntryResource(BaseModel):
    index: int = Field(..., ge=0)
    version: str
    description: str


class SceneResource(BaseModel):
    index: int = Field(..., ge=0)
    name: str
    version: str = Field(..., description="Scene version with one fractional digit.")
    description: str
    changelog: list[ChangelogEntryResource] = Field(default_factory=list)


class DocumentResponse(BaseModel):
    build_version: str
    bundle_version_code: int
    scenes: list[SceneResource] = Field(default_factory=list)


class SceneUpdateRequest(BaseModel):
    name: str | None = Field(default=None, description="New scene name.")
    description: str | None = Field(
        default=None, description="New multi-line scene description."
    )


class SceneVersionRequest(BaseModel):
    version: Decimal = Field(
        ...,
        description="New scene version. Digits after the first decimal are dropped.",
    )


class ChangelogEntryUpdateRequest(BaseModel):
    description: str


class BuildVersionRequest(BaseModel):
    build_version: str = Field(
        ..., description="Version in MajorVersion.MinorVersion.PatchVersion format."
    )

    @field_validator("build_version")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class SceneDisplayResponse(BaseModel):
    build_version_text: str | None
    scene_name: str
    scene_version: str
    scene_description: str
    changelog: str
    found: bool


def _entry_resource(index: int, entry: ChangelogEntry) -> ChangelogEntryResource:
    return ChangelogEntryResource(
        index=index, version=entry.version, description=entry.description
    )


def _scene_resource(index: int, scene: SceneRecord) -> SceneResource:
    return SceneResource(
        index=index,
        name=scene.name,
        version=format_scene_version(scene.version),
        description=scene.description,
        changelog=[
            _entry_resource(position, entry)
            for position, entry in enumerate(scene.changelog)
        ],
    )


def _document_response(document: ChangelogDocument) -> DocumentResponse:
    return DocumentResponse(
        build_version=document.build.build_version,
        bundle_version_code=document.build.bundle_version_code,
        scenes=[
            _scene_resource(index, scene)
            for index, scene in enumerate(document.scenes)
        ],
    )


def create_app(
    editor: ChangelogEditor | None = None,
    *,
    settings: ChangelogSettings | None = None,
) -> FastAPI:
    """Create a FastAPI app wired to ``editor``.

    When ``editor`` is omitted the document configured in ``settings`` (or the
    environment) is opened from disk.
    """

    resolved_settings = settings or ChangelogSettings.from_env()
    active_editor = editor or ChangelogEditor.open(
        FileDocumentStore(resolved_settings.document_path)
    )
    lock = threading.Lock()

    def _run(operation: Callable[[], _T]) -> _T:
        # Handlers run in a threadpool; the document is not safe to share.
        with lock:
            try:
                return operation()
            except IndexError as exc:
                raise HTTPException(status_code=404, detail=str(exc)) from exc
            except ChangelogError as exc:
                raise HTTPException(status_code=500, detail=str(exc)) from exc
            except ValueError as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc

    app = FastAPI(
        title="Scene Changelog Editor API",
        description=(
            "HTTP API for editing per-scene versions, descriptions and changelog "
            "entries. Every mutation saves the document and advances the build "
            "patch version."
        ),
    )
    app.state.editor = active_editor
    app.state.settings = resolved_settings

    @app.get("/api/document", response_model=DocumentResponse, tags=["Document"])
    def get_document() -> DocumentResponse:
        return _run(lambda: _document_response(active_editor.document))

    @app.post("/api/save", response_model=DocumentResponse, tags=["Document"])
    def save_document() -> DocumentResponse:
        def _save() -> DocumentResponse:
            active_editor.save()
            return _document_response(active_editor.document)

        return _run(_save)

    @app.put("/api/build-version", response_model=DocumentResponse, tags=["Document"])
    def put_build_version(payload: BuildVersionRequest) -> DocumentResponse:
        def _update() -> DocumentResponse:
            active_editor.set_build_version(payload.build_version)
            return _document_response(active_editor.document)

        return _run(_update)

    @app.post(
        "/api/scenes", response_model=SceneResource, status_code=201, tags=["Scenes"]
    )
    def create_scene() -> SceneResource:
        def _create() -> SceneResource:
            scene = active_editor.add_scene()
            return _scene_resource(len(active_editor.document.scenes) - 1, scene)

        return _run(_create)

    @app.patch("/api/scenes/{index}", response_model=SceneResource, tags=["Scenes"])
    def update_scene(index: int, payload: SceneUpdateRequest) -> SceneResource:
        return _run(
            lambda: _scene_resource(
                index,
                active_editor.update_scene(
                    index, name=payload.name, description=payload.description
                ),
            )
        )

    @app.delete("/api/scenes/{index}", response_model=SceneResource, tags=["Scenes"])
    def delete_scene(index: int) -> SceneResource:
        return _run(lambda: _scene_resource(index, active_editor.remove_scene(index)))

    @app.put(
        "/api/scenes/{index}/version", response_model=SceneResource, tags=["Scenes"]
    )
    def put_scene_version(index: int, payload: SceneVersionRequest) -> SceneResource:
        return _run(
            lambda: _scene_resource(
                index, active_editor.edit_scene_version(index, payload.version)
            )
        )

    @app.post(
        "/api/scenes/{index}/changelog",
        response_model=ChangelogEntryResource,
        status_code=201,
        tags=["Changelog"],
    )
    def create_changelog_entry(index: int) -> ChangelogEntryResource:
        def _create() -> ChangelogEntryResource:
            entry = active_editor.add_changelog_entry(index)
            position = len(active_editor.scene(index).changelog) - 1
            return _entry_resource(position, entry)

        return _run(_create)

    @app.patch(
        "/api/scenes/{index}/changelog/{entry_index}",
        response_model=ChangelogEntryResource,
        tags=["Changelog"],
    )
    def update_changelog_entry(
        index: int, entry_index: int, payload: ChangelogEntryUpdateRequest
    ) -> ChangelogEntryResource:
        return _run(
            lambda: _entry_resource(
                entry_index,
                active_editor.set_changelog_description(
                    index, entry_index, payload.description
                ),
            )
        )

    @app.delete(
        "/api/scenes/{index}/changelog/{entry_index}",
        response_model=ChangelogEntryResource,
        tags=["Changelog"],
    )
    def delete_changelog_entry(index: int, entry_index: int) -> ChangelogEntryResource:
        return _run(
            lambda: _entry_resource(
                entry_index, active_editor.remove_changelog_entry(index, entry_index)
            )
        )

    @app.get("/api/report", response_class=PlainTextResponse, tags=["Report"])
    def get_report() -> PlainTextResponse:
        content = _run(lambda: render_report(active_editor.document))
        return PlainTextResponse(content, media_type="text/markdown")

    @app.get("/api/display", response_model=SceneDisplayResponse, tags=["Runtime"])
    def get_display(
        scene: str = Query(..., description="Exact, case-sensitive scene name."),
        app_version: str | None = Query(
            None, description="Application version shown beside the bundle code."
        ),
    ) -> SceneDisplayResponse:
        def _describe() -> SceneDisplayResponse:
            display = describe_scene(
                load_runtime_document(active_editor.store),
                scene,
                app_version=app_version or resolved_settings.app_version,
                not_found_text=resolved_settings.not_found_text,
            )
            return SceneDisplayResponse(
                build_version_text=display.build_version_text,
                scene_name=display.scene_name,
                scene_version=display.scene_version,
                scene_description=display.scene_description,
                changelog=display.changelog,
                found=display.found,
            )

        return _run(_describe)

    return app


__all__ = ["create_app"]
