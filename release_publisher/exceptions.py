"""Custom exceptions for release-publisher."""

from typing import Optional


class PublisherError(Exception):
    """Base exception for all publishing operations."""


class PipeSkipError(PublisherError):
    """Raised when a publishing step has nothing valid to do.

    A skip is not a failure: the surrounding run may continue other work.
    """


class PublishingDisabledError(PipeSkipError):
    """Raised when publishing is disabled for the whole run."""

    def __init__(self, message: str = "publishing is disabled") -> None:
        super().__init__(message)


class ConfigurationError(PublisherError):
    """Raised when a configuration value is invalid and the run must stop."""


class TemplateError(PublisherError):
    """Raised when a target URL template cannot be expanded."""


class FileProcessingError(PublisherError):
    """Raised when an artifact cannot be opened or read."""


class TransportError(PublisherError):
    """Raised when an HTTP request could not be built or executed."""


class UploadCancelledError(TransportError):
    """Raised when an upload failed because the run was cancelled."""

    def __init__(self, message: str = "upload cancelled") -> None:
        super().__init__(message)


class ResponseValidationError(PublisherError):
    """Raised by response checkers when a server response is rejected."""


class UploadError(PublisherError):
    """Raised when uploading a single artifact fails.

    Carries enough context to diagnose the failure. The secret is never stored.
    """

    def __init__(
        self,
        kind: str,
        cause: BaseException,
        instance: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        username: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.cause = cause
        self.instance = instance
        self.method = method
        self.url = url
        self.username = username
        self.status_code = status_code
        super().__init__(self._format())

    def _format(self) -> str:
        message = f"{self.kind}: upload failed: {self.cause}"
        details = []
        if self.instance:
            details.append(f"instance={self.instance}")
        if self.username:
            details.append(f"user={self.username}")
        if self.method and self.url:
            details.append(f"request={self.method} {self.url}")
        if self.status_code is not None:
            details.append(f"status={self.status_code}")
        if details:
            message += f" ({', '.join(details)})"
        return message
