"""Models for artifacts produced by a test run."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

type ArtifactKind = Literal[
    "video",
    "image",
    "json",
    "xml",
    "log",
    "feature",
    "folder",
    "text",
    "binary",
    "unknown",
]


@dataclass(frozen=True, kw_only=True)
class Artifact:
    """A file or directory referenced by a test result.

    Derived at projection time from the result's artifact fields, never
    persisted.
    """

    kind: ArtifactKind
    path: Path
    label: str
    test_id: str

    @property
    def name(self) -> str:
        """Base name of the artifact path."""
        return self.path.name
