"""Editing operations over the changelog document."""

from __future__ import annotations

import logging

from .models import (
    DEFAULT_CHANGELOG_DESCRIPTION,
    DEFAULT_SCENE_DESCRIPTION,
    DEFAULT_SCENE_NAME,
    DEFAULT_SCENE_VERSION,
    ChangelogDocument,
    ChangelogEntry,
    SceneRecord,
)
from .persistence import DocumentStore
from .versioning import (
    SceneVersionLike,
    format_scene_version,
    next_build_patch,
    next_scene_version,
    normalise_build_version,
    truncate_scene_version,
)

LOG = logging.getLogger(__name__)


class ChangelogEditor:
    """Mutate a changelog document and persist it after every change.

    Every call to :meth:`save` advances the patch component of the build
    version, whatever the reason for saving. Confirmation before destructive
    operations is left to the caller.
    """

    def __init__(self, store: DocumentStore, document: ChangelogDocument) -> None:
        self._store = store
        self._document = document

    @classmethod
    def open(cls, store: DocumentStore) -> "ChangelogEditor":
        """Load the stored document (or an empty one) for editing."""

        return cls(store, store.load())

    @property
    def document(self) -> ChangelogDocument:
        return self._document

    @property
    def store(self) -> DocumentStore:
        return self._store

    def scene(self, index: int) -> SceneRecord:
        """Return the scene at ``index``.

        Raises:
            IndexError: If no scene exists at ``index``.
        """

        scenes = self._document.scenes
        if not 0 <= index < len(scenes):
            raise IndexError(
                f"Scene index {index} is out of range ({len(scenes)} scenes)"
            )
        return scenes[index]

    def entry(self, scene_index: int, entry_index: int) -> ChangelogEntry:
        """Return a changelog entry of the scene at ``scene_index``."""

        changelog = self.scene(scene_index).changelog
        if not 0 <= entry_index < len(changelog):
            raise IndexError(
                f"Changelog entry index {entry_index} is out of range "
                f"({len(changelog)} entries)"
            )
        return changelog[entry_index]

    def add_scene(self) -> SceneRecord:
        scene = SceneRecord(
            name=DEFAULT_SCENE_NAME,
            version=DEFAULT_SCENE_VERSION,
            description=DEFAULT_SCENE_DESCRIPTION,
        )
        self._document.scenes.append(scene)
        self.save()
        return scene

    def remove_scene(self, index: int) -> SceneRecord:
        scene = self.scene(index)
        del self._document.scenes[index]
        self.save()
        return scene

    def update_scene(
        self,
        index: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> SceneRecord:
        """Edit the free-text fields of a scene with a single save."""

        scene = self.scene(index)
        if name is not None:
            scene.name = name
        if description is not None:
            scene.description = description
        self.save()
        return scene

    def rename_scene(self, index: int, name: str) -> SceneRecord:
        return self.update_scene(index, name=name)

    def set_scene_description(self, index: int, description: str) -> SceneRecord:
        return self.update_scene(index, description=description)

    def edit_scene_version(self, index: int, new_version: SceneVersionLike) -> SceneRecord:
        """Set the scene version, keeping a single fractional digit.

        Extra precision is truncated rather than rounded, so ``1.29`` is stored
        as ``1.2``. Existing changelog entries keep their labels.
        """

        scene = self.scene(index)
        scene.version = truncate_scene_version(new_version)
        self.save()
        return scene

    def add_changelog_entry(self, index: int) -> ChangelogEntry:
        """Advance the scene version and append an entry labelled with it."""

        scene = self.scene(index)
        scene.version = next_scene_version(scene.version)
        entry = ChangelogEntry(
            version=format_scene_version(scene.version),
            description=DEFAULT_CHANGELOG_DESCRIPTION,
        )
        scene.changelog.append(entry)
        self.save()
        return entry

    def set_changelog_description(
        self, scene_index: int, entry_index: int, description: str
    ) -> ChangelogEntry:
        entry = self.entry(scene_index, entry_index)
        entry.description = description
        self.save()
        return entry

    def remove_changelog_entry(
        self, scene_index: int, entry_index: int
    ) -> ChangelogEntry:
        """Delete one changelog entry; siblings and the scene version stay as-is."""

        entry = self.entry(scene_index, entry_index)
        del self.scene(scene_index).changelog[entry_index]
        self.save()
        return entry

    def set_build_version(self, new_version: str) -> str:
        """Replace the build version, falling back to the default when malformed.

        The value is saved straight away, so the stored version is the given one
        with its patch already advanced.
        """

        self._document.build.build_version = normalise_build_version(new_version)
        self.save()
        return self._document.build.build_version

    def save(self) -> None:
        """Advance the build patch and persist the whole document."""

        build = self._document.build
        build.build_version = next_build_patch(build.build_version)
        LOG.info("Updated project version to %s", build.build_version)
        self._store.save(self._document)


__all__ = ["ChangelogEditor"]
