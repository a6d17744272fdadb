"""Publishing destination implementations."""

from .artifactory import (
    ArtifactoryDestination,
    ArtifactoryErrorResponse,
    ArtifactoryInstance,
    ArtifactoryResponse,
    check_upload_response,
)
from .upload import UploadDestination

__all__ = [
    "UploadDestination",
    "ArtifactoryDestination",
    "ArtifactoryInstance",
    "ArtifactoryResponse",
    "ArtifactoryErrorResponse",
    "check_upload_response",
]
