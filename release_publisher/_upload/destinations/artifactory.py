"""Artifactory destination for artifact uploads.

Artifacts are deployed with PUT to the target URL followed by the artifact
name. Artifactory answers successful deploys with a JSON description of the
stored artifact and failed ones with a JSON error envelope.

Credentials via environment variables (NAME is the upper-cased instance name):
    ARTIFACTORY_<NAME>_USERNAME: Username, when the instance doesn't set one
    ARTIFACTORY_<NAME>_SECRET: Password or API key (required)

Docs: https://www.jfrog.com/confluence/display/RTF/Artifactory+REST+API#ArtifactoryRESTAPI-Example-DeployinganArtifact
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests

from release_publisher.context import RunContext
from release_publisher.exceptions import PipeSkipError, ResponseValidationError

from ..assets import open_asset
from ..client import get_http_client
from ..config import check_config
from ..orchestrator import UploadOrchestrator
from ..protocol import MODE_ARCHIVE, AssetOpener, TargetConfig
from ..result import UploadResult

KIND = "artifactory"

ARTIFACTORY_METHOD = "PUT"


@dataclass
class ArtifactoryInstance:
    """
    Configuration of one Artifactory instance.

    Attributes:
        name: Instance name, used in credential env var names
        target: Repository URL or URL template; the artifact name is appended
        ids: Artifact IDs allowed for this instance (empty means all)
        username: Username, falls back to ARTIFACTORY_<NAME>_USERNAME
        mode: "archive" or "binary", defaults to archive
        trusted_certificates: PEM encoded certificates to trust
        checksum: Also upload checksum files
        signature: Also upload signature files
    """

    name: str
    target: str
    ids: Tuple[str, ...] = ()
    username: str = ""
    mode: str = ""
    trusted_certificates: str = ""
    checksum: bool = False
    signature: bool = False

    def to_target_config(self) -> TargetConfig:
        return TargetConfig(
            name=self.name,
            target=self.target,
            ids=tuple(self.ids),
            username=self.username,
            mode=self.mode,
            method=ARTIFACTORY_METHOD,
            trusted_certificates=self.trusted_certificates,
            checksum=self.checksum,
            signature=self.signature,
            custom_artifact_name=False,
        )


@dataclass
class ArtifactoryChecksums:
    """Checksums computed by Artifactory."""

    sha1: str = ""
    md5: str = ""
    sha256: str = ""

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "ArtifactoryChecksums":
        data = data or {}
        return cls(sha1=data.get("sha1", ""), md5=data.get("md5", ""), sha256=data.get("sha256", ""))


@dataclass
class ArtifactoryResponse:
    """Body of a successful deploy response."""

    repo: str = ""
    path: str = ""
    created: str = ""
    created_by: str = ""
    download_uri: str = ""
    mime_type: str = ""
    size: str = ""
    checksums: ArtifactoryChecksums = field(default_factory=ArtifactoryChecksums)
    original_checksums: ArtifactoryChecksums = field(default_factory=ArtifactoryChecksums)
    uri: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ArtifactoryResponse":
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls(
            repo=data.get("repo", ""),
            path=data.get("path", ""),
            created=data.get("created", ""),
            created_by=data.get("createdBy", ""),
            download_uri=data.get("downloadUri", ""),
            mime_type=data.get("mimeType", ""),
            size=str(data.get("size", "")),
            checksums=ArtifactoryChecksums.from_json(data.get("checksums")),
            original_checksums=ArtifactoryChecksums.from_json(data.get("originalChecksums")),
            uri=data.get("uri", ""),
        )


@dataclass
class ArtifactoryError:
    """One entry of an Artifactory error envelope."""

    status: int
    message: str

    def __str__(self) -> str:
        return f"{{status: {self.status}, message: {self.message}}}"


class ArtifactoryErrorResponse(ResponseValidationError):
    """Raised when Artifactory rejects an upload; lists every reported error."""

    def __init__(self, response: requests.Response, errors: Sequence[ArtifactoryError] = ()) -> None:
        self.response = response
        self.errors = list(errors)
        request = response.request
        method = request.method if request is not None else ""
        url = request.url if request is not None else response.url
        rendered = " ".join(str(e) for e in self.errors)
        super().__init__(f"{method} {url}: {response.status_code} [{rendered}]")


def check_response(response: requests.Response) -> None:
    """
    Check an Artifactory API response for errors.

    A response is an error if its status is outside the 2xx range. Error
    bodies are either empty or a JSON envelope ``{"errors": [...]}``.

    Raises:
        ArtifactoryErrorResponse: For non-2xx responses
        ResponseValidationError: If the error body isn't valid JSON
    """
    if 200 <= response.status_code <= 299:
        return

    errors: List[ArtifactoryError] = []
    data = response.content
    if data:
        try:
            payload = json.loads(data)
        except ValueError as e:
            raise ResponseValidationError(f"artifactory: invalid error response ({response.status_code}): {e}") from e
        for item in payload.get("errors", []) if isinstance(payload, dict) else []:
            errors.append(ArtifactoryError(status=int(item.get("status", 0)), message=str(item.get("message", ""))))

    raise ArtifactoryErrorResponse(response, errors)


def check_upload_response(response: requests.Response) -> None:
    """Accept 2xx responses whose body decodes as an Artifactory deploy response."""
    check_response(response)
    try:
        ArtifactoryResponse.from_json(json.loads(response.content))
    except ValueError as e:
        raise ResponseValidationError(f"artifactory: could not decode upload response: {e}") from e


class ArtifactoryDestination:
    """
    Publishes artifacts to Artifactory instances.

    Example:
        destination = ArtifactoryDestination(ctx, [ArtifactoryInstance(name="prod", target="https://af/repo")])
        destination.default()
        results = destination.publish()
    """

    def __init__(
        self,
        ctx: RunContext,
        instances: Sequence[ArtifactoryInstance] = (),
        asset_opener: AssetOpener = open_asset,
        client_factory: Callable[[TargetConfig], requests.Session] = get_http_client,
    ) -> None:
        self._ctx = ctx
        self._instances: List[ArtifactoryInstance] = list(instances)
        self._orchestrator = UploadOrchestrator(
            ctx,
            KIND,
            check_upload_response,
            asset_opener=asset_opener,
            client_factory=client_factory,
        )

    @property
    def name(self) -> str:
        return KIND

    @property
    def results(self) -> List[UploadResult]:
        return self._orchestrator.results

    def default(self) -> None:
        """Default every instance's mode to archive."""
        for instance in self._instances:
            if not instance.mode:
                instance.mode = MODE_ARCHIVE

    def publish(self) -> List[UploadResult]:
        """
        Deploy artifacts to every configured instance.

        Raises:
            PipeSkipError: If no instance is configured or an instance is unusable
            UploadError: The first deploy failure
        """
        if not self._instances:
            raise PipeSkipError("artifactory section is not configured")

        configs = [instance.to_target_config() for instance in self._instances]

        for config in configs:
            check_config(self._ctx, config, KIND)

        return self._orchestrator.publish(configs)
