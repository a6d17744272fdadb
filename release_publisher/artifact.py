"""Release artifact inventory and filter predicates.

Artifacts are produced by earlier build steps (archiving, packaging, signing).
The publisher only reads them: it filters the inventory, opens artifact
content for upload and computes checksums.

Usage:
    from release_publisher.artifact import ArtifactInventory, ArtifactType, by_type, or_

    inventory = ArtifactInventory()
    inventory.add(Artifact(name="app.tar.gz", path="dist/app.tar.gz", type=ArtifactType.UPLOADABLE_ARCHIVE))
    archives = inventory.filter(or_(by_type(ArtifactType.UPLOADABLE_ARCHIVE), by_type(ArtifactType.CHECKSUM)))
"""

import hashlib
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from release_publisher.exceptions import FileProcessingError

# Read size used when hashing artifact content
_CHUNK_SIZE = 64 * 1024


class ArtifactType(Enum):
    """Kinds of artifacts a build can produce."""

    UPLOADABLE_BINARY = "binary"
    UPLOADABLE_ARCHIVE = "archive"
    LINUX_PACKAGE = "linux-package"
    CHECKSUM = "checksum"
    SIGNATURE = "signature"


@dataclass(frozen=True)
class Artifact:
    """
    A locally built release artifact.

    Attributes:
        name: File name of the artifact, used as the default URL suffix
        path: Location of the artifact on disk
        type: What kind of artifact this is
        id: Build ID used by target allow-lists
        os: Target operating system, exposed to URL templates
        arch: Target architecture, exposed to URL templates
        arm: ARM version for arm builds, exposed to URL templates
        extra: Additional producer-specific metadata
    """

    name: str
    path: str
    type: ArtifactType
    id: Optional[str] = None
    os: str = ""
    arch: str = ""
    arm: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def checksum(self, algorithm: str = "sha256") -> str:
        """
        Compute the hex digest of the artifact content.

        Args:
            algorithm: Any algorithm name accepted by hashlib.new

        Returns:
            Hex encoded digest

        Raises:
            FileProcessingError: If the algorithm is unknown or the file can't be read
        """
        try:
            digest = hashlib.new(algorithm)
        except ValueError as e:
            raise FileProcessingError(f"{self.name}: unsupported checksum algorithm '{algorithm}'") from e

        try:
            with Path(self.path).open("rb") as f:
                for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as e:
            raise FileProcessingError(f"{self.name}: failed to checksum {self.path}: {e}") from e

        return digest.hexdigest()


# A predicate deciding whether an artifact is selected
Filter = Callable[[Artifact], bool]


def by_type(artifact_type: ArtifactType) -> Filter:
    """Select artifacts of the given type."""
    return lambda a: a.type == artifact_type


def by_ids(*ids: str) -> Filter:
    """Select artifacts whose ID is one of ``ids``."""
    allowed = frozenset(ids)
    return lambda a: a.id in allowed


def or_(*filters: Filter) -> Filter:
    """Select artifacts matching any of the filters."""
    return lambda a: any(f(a) for f in filters)


def and_(*filters: Filter) -> Filter:
    """Select artifacts matching all of the filters."""
    return lambda a: all(f(a) for f in filters)


class ArtifactInventory:
    """Thread-safe collection of the artifacts produced by a run."""

    def __init__(self, artifacts: Optional[Iterable[Artifact]] = None) -> None:
        self._lock = threading.Lock()
        self._items: List[Artifact] = list(artifacts or [])

    def add(self, artifact: Artifact) -> None:
        with self._lock:
            self._items.append(artifact)

    def list(self) -> List[Artifact]:
        """Return a snapshot of all artifacts in insertion order."""
        with self._lock:
            return list(self._items)

    def filter(self, predicate: Filter) -> List[Artifact]:
        """Return the artifacts matching ``predicate`` in insertion order."""
        return [a for a in self.list() if predicate(a)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
