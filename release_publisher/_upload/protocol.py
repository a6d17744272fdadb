"""Core types and strategy protocols for HTTP artifact uploads.

This module defines the target configuration shared by every integration and
the pluggable strategies an integration can inject:

- TargetURLResolver: computes the destination URL of one artifact
- HeaderGenerator: computes extra request headers for one artifact
- ResponseChecker: decides whether a server response is a success
"""

from dataclasses import dataclass, field, replace
from typing import IO, TYPE_CHECKING, Callable, Dict, List, Optional, Protocol, Tuple

import requests

if TYPE_CHECKING:
    from ..artifact import Artifact
    from ..context import RunContext
    from .result import UploadResult

# Upload only compiled binaries
MODE_BINARY = "binary"
# Upload release archives and linux packages
MODE_ARCHIVE = "archive"

VALID_MODES = (MODE_ARCHIVE, MODE_BINARY)

DEFAULT_METHOD = "PUT"


class TargetURLResolver(Protocol):
    """Produces the final upload URL for an artifact."""

    def __call__(self, ctx: "RunContext", config: "TargetConfig", artifact: "Artifact") -> str: ...


class HeaderGenerator(Protocol):
    """Produces extra HTTP headers for an artifact upload."""

    def __call__(self, artifact: "Artifact") -> Dict[str, str]: ...


class ResponseChecker(Protocol):
    """
    Validates a server response.

    Implementations return normally when the response is a success and raise
    an exception when it must be considered a failure.
    """

    def __call__(self, response: requests.Response) -> None: ...


@dataclass(frozen=True)
class TargetConfig:
    """
    Configuration of one upload destination.

    Attributes:
        name: Unique label of the destination, also used in credential env var names
        target: Target URL or URL template
        ids: Artifact IDs allowed for this destination (empty means all)
        username: Username for basic auth, falls back to <KIND>_<NAME>_USERNAME
        mode: "archive" or "binary"
        method: HTTP method used for the upload
        checksum_header: Header carrying the sha256 digest of the artifact
        trusted_certificates: PEM encoded certificates to trust in addition to the system store
        checksum: Also upload checksum files
        signature: Also upload signature files
        custom_artifact_name: Don't append the artifact name to the target URL
        target_url_resolver: Strategy overriding the default URL resolution
        header_generator: Strategy overriding the default header generation
    """

    name: str
    target: str
    ids: Tuple[str, ...] = ()
    username: str = ""
    mode: str = ""
    method: str = ""
    checksum_header: str = ""
    trusted_certificates: str = ""
    checksum: bool = False
    signature: bool = False
    custom_artifact_name: bool = False
    target_url_resolver: Optional[TargetURLResolver] = field(default=None, compare=False, repr=False)
    header_generator: Optional[HeaderGenerator] = field(default=None, compare=False, repr=False)

    def with_defaults(self) -> "TargetConfig":
        """Return a copy with an empty mode set to archive and an empty method set to PUT."""
        return replace(
            self,
            ids=tuple(self.ids),
            mode=self.mode or MODE_ARCHIVE,
            method=self.method or DEFAULT_METHOD,
        )


@dataclass
class Asset:
    """An open artifact stream and its size, owned by a single upload attempt."""

    stream: IO[bytes]
    size: int

    def close(self) -> None:
        self.stream.close()


# Opens the content of an artifact for upload; receives the integration kind for error messages
AssetOpener = Callable[[str, "Artifact"], Asset]


class Destination(Protocol):
    """
    Protocol for publishing integrations.

    Each integration turns its user-facing configuration into TargetConfigs,
    validates them and hands them to the UploadOrchestrator.

    Example:
        class UploadDestination:
            name = "upload"

            def default(self) -> None:
                # fill in default mode and method
                ...

            def publish(self) -> List[UploadResult]:
                # check every target, then upload
                ...
    """

    @property
    def name(self) -> str:
        """Integration kind, e.g. "upload" or "artifactory"."""
        ...

    def default(self) -> None:
        """Apply configuration defaults. Called once before publish."""
        ...

    def publish(self) -> List["UploadResult"]:
        """
        Publish artifacts to every configured target.

        Raises:
            PipeSkipError: If the integration isn't configured or a target is unusable
        """
        ...
