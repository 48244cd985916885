"""Classify artifact paths into display kinds."""

import asyncio
import logging
import stat
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from execution_tracker.models.artifact import ArtifactKind

log = logging.getLogger(__name__)

EXTENSION_KINDS: Mapping[str, ArtifactKind] = {
    ".mp4": "video",
    ".webm": "video",
    ".mov": "video",
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".gif": "image",
    ".json": "json",
    ".xml": "xml",
    ".log": "log",
    ".feature": "feature",
}

SNIFF_SIZE = 4096


@dataclass(kw_only=True)
class ArtifactClassifier:
    """Determine the display kind of an artifact path.

    Results are memoized per path for the lifetime of the classifier since
    artifact paths are not rewritten once a test result references them.
    Paths that cannot be read classify as ``unknown`` and are not memoized,
    so a file that appears later is classified properly on the next call.
    """

    _kinds: dict[Path, ArtifactKind] = field(
        default_factory=dict, init=False, repr=False
    )

    async def classify(self, path: str | Path) -> ArtifactKind:
        """Return the kind of the artifact at path, never raising."""
        key = Path(path)
        if (cached := self._kinds.get(key)) is not None:
            return cached

        try:
            kind = await asyncio.to_thread(self.inspect, key)
        except (OSError, ValueError) as e:
            log.debug("Cannot classify artifact %s: %s", key, e)
            return "unknown"

        self._kinds[key] = kind
        return kind

    def inspect(self, path: Path) -> ArtifactKind:
        """Classify path by reading the file system.

        Raises:
            OSError: If the path cannot be stat'ed or read
            ValueError: If the path contains a NUL byte

        """
        if stat.S_ISDIR(path.stat().st_mode):
            return "folder"

        if (kind := EXTENSION_KINDS.get(path.suffix.lower())) is not None:
            return kind

        with path.open("rb") as f:
            head = f.read(SNIFF_SIZE)
        return "binary" if b"\x00" in head else "text"
