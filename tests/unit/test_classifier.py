"""Tests for artifact classification."""

from pathlib import Path
from unittest.mock import patch

import pytest

from execution_tracker.classifier import SNIFF_SIZE, ArtifactClassifier


@pytest.fixture
def classifier() -> ArtifactClassifier:
    """Create a classifier with an empty cache."""
    return ArtifactClassifier()


async def test_directory_is_folder(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Directories classify as folders regardless of their name."""
    screenshots = tmp_path / "screenshots.png"
    screenshots.mkdir()

    assert await classifier.classify(screenshots) == "folder"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("recording.mp4", "video"),
        ("recording.webm", "video"),
        ("recording.MOV", "video"),
        ("step_1.png", "image"),
        ("step_2.JPG", "image"),
        ("step_3.jpeg", "image"),
        ("spinner.gif", "image"),
        ("network_logs.json", "json"),
        ("results.xml", "xml"),
        ("agent.log", "log"),
        ("login.feature", "feature"),
    ],
)
async def test_classifies_by_extension(
    classifier: ArtifactClassifier, tmp_path: Path, name: str, expected: str
) -> None:
    """Known extensions map to their kind without sniffing content."""
    path = tmp_path / name
    path.write_bytes(b"\x00\x01")

    assert await classifier.classify(path) == expected


async def test_unknown_extension_with_text_content(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Unrecognized files without NUL bytes are text."""
    path = tmp_path / "plan.md"
    path.write_text("1. Open the login page\n")

    assert await classifier.classify(str(path)) == "text"


async def test_unknown_extension_with_binary_content(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """A NUL byte in the sniffed prefix marks the file as binary."""
    path = tmp_path / "trace.zip"
    path.write_bytes(b"PK\x03\x04\x00\x00")

    assert await classifier.classify(path) == "binary"


async def test_only_sniffs_prefix(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """NUL bytes beyond the sniffed prefix are not seen."""
    path = tmp_path / "long.txt"
    path.write_bytes(b"a" * SNIFF_SIZE + b"\x00")

    assert await classifier.classify(path) == "text"


async def test_missing_path_is_unknown(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Paths that cannot be read classify as unknown instead of raising."""
    assert await classifier.classify(tmp_path / "deleted.mp4") == "unknown"


async def test_path_with_nul_byte_is_unknown(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Paths the OS rejects outright classify as unknown instead of raising."""
    assert await classifier.classify(tmp_path / "bad\x00path.bin") == "unknown"


async def test_unknown_is_not_memoized(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """A path that appears after a failed classification is classified again."""
    path = tmp_path / "late.txt"
    assert await classifier.classify(path) == "unknown"

    path.write_text("now here")

    assert await classifier.classify(path) == "text"


async def test_memoizes_per_path(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Classifying the same path twice reads the disk once."""
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    with patch.object(classifier, "inspect", wraps=classifier.inspect) as inspect:
        first = await classifier.classify(path)
        second = await classifier.classify(path)

    assert first == second == "text"
    inspect.assert_called_once_with(path)


async def test_memoized_kind_survives_deletion(
    classifier: ArtifactClassifier, tmp_path: Path
) -> None:
    """Referenced paths are treated as immutable once classified."""
    path = tmp_path / "video.webm"
    path.write_bytes(b"")
    assert await classifier.classify(path) == "video"

    path.unlink()

    assert await classifier.classify(path) == "video"
