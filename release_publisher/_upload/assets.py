"""Opening artifact content for upload."""

import os
from pathlib import Path

from release_publisher.artifact import Artifact
from release_publisher.exceptions import FileProcessingError

from .protocol import Asset


def open_asset(kind: str, artifact: Artifact) -> Asset:
    """
    Open an artifact file for streaming upload.

    Args:
        kind: Integration kind used in error messages
        artifact: Artifact to open

    Returns:
        Asset owning the open file; the caller must close it

    Raises:
        FileProcessingError: If the file can't be opened or is a directory
    """
    path = Path(artifact.path)
    if path.is_dir():
        raise FileProcessingError(f"{kind}: upload failed: the asset to upload can't be a directory")

    try:
        stream = path.open("rb")
    except OSError as e:
        raise FileProcessingError(f"{kind}: upload failed: can't open {artifact.path}: {e}") from e

    try:
        size = os.fstat(stream.fileno()).st_size
    except OSError as e:
        stream.close()
        raise FileProcessingError(f"{kind}: upload failed: can't stat {artifact.path}: {e}") from e

    return Asset(stream=stream, size=size)
