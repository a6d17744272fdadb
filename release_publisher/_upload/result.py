"""UploadResult dataclass for per-artifact upload outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


class FailureKind(Enum):
    """Why an artifact upload failed."""

    MISCONFIGURATION = "misconfiguration"
    RESOURCE = "resource"
    TRANSPORT = "transport"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass
class UploadResult:
    """
    Result of uploading one artifact to one target.

    Attributes:
        success: Whether the upload completed and the response was accepted
        kind: Integration kind that handled the upload
        target_name: Name of the target configuration
        artifact_name: Name of the uploaded artifact
        url: Resolved upload URL, when resolution succeeded
        failure: Failure category if the upload failed
        error: Exception describing the failure
        response: Server response, kept for rejected responses so callers can inspect it
    """

    success: bool
    kind: str
    target_name: str
    artifact_name: str
    url: Optional[str] = None
    failure: Optional[FailureKind] = None
    error: Optional[Exception] = None
    response: Optional[requests.Response] = None

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.success and self.error is not None:
            raise ValueError("Successful result should not have an error")
        if not self.success and (self.error is None or self.failure is None):
            raise ValueError("Failed result must have an error and a failure kind")

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    @classmethod
    def success_result(
        cls,
        kind: str,
        target_name: str,
        artifact_name: str,
        url: Optional[str] = None,
        response: Optional[requests.Response] = None,
    ) -> "UploadResult":
        """Create a successful upload result."""
        return cls(
            success=True,
            kind=kind,
            target_name=target_name,
            artifact_name=artifact_name,
            url=url,
            response=response,
        )

    @classmethod
    def failure_result(
        cls,
        kind: str,
        target_name: str,
        artifact_name: str,
        failure: FailureKind,
        error: Exception,
        url: Optional[str] = None,
        response: Optional[requests.Response] = None,
    ) -> "UploadResult":
        """Create a failed upload result."""
        return cls(
            success=False,
            kind=kind,
            target_name=target_name,
            artifact_name=artifact_name,
            url=url,
            failure=failure,
            error=error,
            response=response,
        )
