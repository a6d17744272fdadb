"""HTTP artifact upload architecture.

This module uploads release artifacts to HTTP targets:
- Per-target artifact selection (archive or binary mode, checksums, signatures, IDs)
- Credentials from the config or <KIND>_<NAME>_USERNAME / <KIND>_<NAME>_SECRET
- Concurrent uploads bounded by the run's parallelism
- Pluggable URL resolution, extra headers and response checks

Usage:
    from release_publisher._upload import (
        TargetConfig,
        UploadOrchestrator,
        check_status_code,
    )

    orchestrator = UploadOrchestrator(ctx, kind="upload", checker=check_status_code)
    results = orchestrator.publish([
        TargetConfig(name="production", target="https://uploads.example.com/releases").with_defaults(),
    ])
"""

from .assets import open_asset
from .client import get_http_client
from .config import check_config, resolve_secret, resolve_username
from .destinations import (
    ArtifactoryDestination,
    ArtifactoryErrorResponse,
    ArtifactoryInstance,
    ArtifactoryResponse,
    UploadDestination,
)
from .filters import build_filter
from .group import ConcurrencyGroup
from .orchestrator import UploadOrchestrator, upload
from .protocol import (
    MODE_ARCHIVE,
    MODE_BINARY,
    Asset,
    Destination,
    HeaderGenerator,
    ResponseChecker,
    TargetConfig,
    TargetURLResolver,
)
from .registry import DestinationRegistry, PublishReport
from .result import FailureKind, UploadResult
from .strategies import ChecksumHeaderGenerator, TemplateTargetURLResolver, check_status_code
from .uploader import ArtifactUploader

__all__ = [
    # Core types
    "MODE_ARCHIVE",
    "MODE_BINARY",
    "Asset",
    "TargetConfig",
    "UploadResult",
    "FailureKind",
    # Strategies
    "TargetURLResolver",
    "HeaderGenerator",
    "ResponseChecker",
    "TemplateTargetURLResolver",
    "ChecksumHeaderGenerator",
    "check_status_code",
    # Building blocks
    "check_config",
    "resolve_username",
    "resolve_secret",
    "build_filter",
    "open_asset",
    "get_http_client",
    "ConcurrencyGroup",
    "ArtifactUploader",
    # Orchestration
    "UploadOrchestrator",
    "upload",
    "Destination",
    "DestinationRegistry",
    "PublishReport",
    # Destination implementations
    "UploadDestination",
    "ArtifactoryDestination",
    "ArtifactoryInstance",
    "ArtifactoryResponse",
    "ArtifactoryErrorResponse",
]
