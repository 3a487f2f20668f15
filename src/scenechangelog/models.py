"""Data model shared by the changelog editor and the runtime display."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

DEFAULT_BUILD_VERSION = "1.0.001"
DEFAULT_BUNDLE_VERSION_CODE = 1
DEFAULT_SCENE_NAME = "New Scene"
DEFAULT_SCENE_VERSION = Decimal("1.0")
DEFAULT_SCENE_DESCRIPTION = "Description here"
DEFAULT_CHANGELOG_DESCRIPTION = "New changes in this version"


@dataclass
class ChangelogEntry:
    """A single versioned note describing what changed in a scene.

    ``version`` is derived from the scene version at the moment the entry is
    created and is not edited afterwards.
    """

    version: str
    description: str = DEFAULT_CHANGELOG_DESCRIPTION


@dataclass
class SceneRecord:
    """Version metadata and changelog for one scene of the game."""

    name: str = DEFAULT_SCENE_NAME
    version: Decimal = DEFAULT_SCENE_VERSION
    description: str = DEFAULT_SCENE_DESCRIPTION
    changelog: List[ChangelogEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.version, Decimal):
            self.version = Decimal(str(self.version))

    @property
    def latest_entry(self) -> ChangelogEntry | None:
        """Return the most recently appended changelog entry, if any."""

        if not self.changelog:
            return None
        return self.changelog[-1]


@dataclass
class BuildMetadata:
    """Build-wide version information."""

    build_version: str = DEFAULT_BUILD_VERSION
    bundle_version_code: int = DEFAULT_BUNDLE_VERSION_CODE


@dataclass
class ChangelogDocument:
    """Root aggregate persisted as a single JSON file."""

    build: BuildMetadata = field(default_factory=BuildMetadata)
    scenes: List[SceneRecord] = field(default_factory=list)

    def clone(self) -> "ChangelogDocument":
        """Return a deep copy that can be mutated independently."""

        return ChangelogDocument(
            build=BuildMetadata(
                build_version=self.build.build_version,
                bundle_version_code=self.build.bundle_version_code,
            ),
            scenes=[
                SceneRecord(
                    name=scene.name,
                    version=scene.version,
                    description=scene.description,
                    changelog=[
                        ChangelogEntry(
                            version=entry.version, description=entry.description
                        )
                        for entry in scene.changelog
                    ],
                )
                for scene in self.scenes
            ],
        )


__all__ = [
    "BuildMetadata",
    "ChangelogDocument",
    "ChangelogEntry",
    "SceneRecord",
    "DEFAULT_BUILD_VERSION",
    "DEFAULT_BUNDLE_VERSION_CODE",
    "DEFAULT_CHANGELOG_DESCRIPTION",
    "DEFAULT_SCENE_DESCRIPTION",
    "DEFAULT_SCENE_NAME",
    "DEFAULT_SCENE_VERSION",
]
