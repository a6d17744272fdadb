"""Uploading a single artifact to a single target."""

from typing import Callable, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from release_publisher.artifact import Artifact
from release_publisher.context import RunContext
from release_publisher.exceptions import (
    FileProcessingError,
    PipeSkipError,
    TemplateError,
    TransportError,
    UploadCancelledError,
    UploadError,
)
from release_publisher.http_client import UPLOAD_TIMEOUT
from release_publisher.logging_config import logger

from .assets import open_asset
from .client import get_http_client, release_http_client
from .config import resolve_secret, resolve_username
from .protocol import Asset, AssetOpener, HeaderGenerator, ResponseChecker, TargetConfig, TargetURLResolver
from .result import FailureKind, UploadResult
from .strategies import ChecksumHeaderGenerator, TemplateTargetURLResolver, no_headers

DEFAULT_TARGET_URL_RESOLVER: TargetURLResolver = TemplateTargetURLResolver()


class ArtifactUploader:
    """
    Uploads artifacts of one integration kind.

    The asset opener and the client factory are injected so tests can replace
    file and network access.

    Example:
        uploader = ArtifactUploader(ctx, "upload", check_status_code)
        result = uploader.upload(config, artifact)
        if not result.success:
            raise result.error
    """

    def __init__(
        self,
        ctx: RunContext,
        kind: str,
        checker: ResponseChecker,
        asset_opener: AssetOpener = open_asset,
        client_factory: Callable[[TargetConfig], requests.Session] = get_http_client,
        timeout: float = UPLOAD_TIMEOUT,
    ) -> None:
        self._ctx = ctx
        self._kind = kind
        self._checker = checker
        self._asset_opener = asset_opener
        self._client_factory = client_factory
        self._timeout = timeout

    @property
    def kind(self) -> str:
        return self._kind

    def upload(
        self,
        config: TargetConfig,
        artifact: Artifact,
        client: Optional[requests.Session] = None,
    ) -> UploadResult:
        """
        Upload one artifact to the target described by ``config``.

        Never raises for upload problems; failures are returned as an
        UploadResult carrying the error.

        Args:
            config: Validated target configuration
            artifact: Artifact to upload
            client: Session shared by the target's uploads. When omitted a
                session is obtained from the client factory and released
                after the upload.

        Returns:
            UploadResult describing the outcome
        """
        if self._ctx.cancelled:
            return self._upload_failed(
                config, artifact, FailureKind.CANCELLED, UploadCancelledError(), None, config.username
            )

        try:
            username = resolve_username(self._ctx, config, self._kind)
            secret = resolve_secret(self._ctx, config, self._kind)
        except PipeSkipError as e:
            return self._failure(config, artifact, FailureKind.MISCONFIGURATION, e)

        resolver = config.target_url_resolver or DEFAULT_TARGET_URL_RESOLVER
        try:
            url = resolver(self._ctx, config, artifact)
        except Exception as e:
            message = f"{self._kind}: error while building the target url"
            logger.error(f"{message}: {e}", extra={"kind": self._kind, "instance": config.name})
            return self._failure(config, artifact, FailureKind.MISCONFIGURATION, TemplateError(f"{message}: {e}"))

        logger.debug(f"generated target url: {url}", extra={"instance": config.name, "url": url})

        try:
            asset = self._asset_opener(self._kind, artifact)
        except (FileProcessingError, OSError) as e:
            return self._failure(config, artifact, FailureKind.RESOURCE, e, url=url)

        try:
            try:
                headers = self._header_generator(config)(artifact)
            except Exception as e:
                error = FileProcessingError(f"{self._kind}: failed to generate headers for {artifact.name}: {e}")
                return self._failure(config, artifact, FailureKind.RESOURCE, error, url=url)

            return self._send(config, artifact, url, username, secret, headers, asset, client)
        finally:
            asset.close()

    def _header_generator(self, config: TargetConfig) -> HeaderGenerator:
        if config.header_generator is not None:
            return config.header_generator
        if config.checksum_header:
            return ChecksumHeaderGenerator(config.checksum_header)
        return no_headers

    def _send(
        self,
        config: TargetConfig,
        artifact: Artifact,
        url: str,
        username: str,
        secret: str,
        headers: Dict[str, str],
        asset: Asset,
        client: Optional[requests.Session],
    ) -> UploadResult:
        """Obtain the session unless one was given, then execute the upload."""
        request_headers = {"Content-Length": str(asset.size)}
        request_headers.update(headers)

        if client is not None:
            return self._execute(config, artifact, url, username, secret, request_headers, asset, client)

        try:
            client = self._client_factory(config)
        except Exception as e:
            return self._upload_failed(config, artifact, FailureKind.TRANSPORT, TransportError(str(e)), url, username)
        try:
            return self._execute(config, artifact, url, username, secret, request_headers, asset, client)
        finally:
            release_http_client(client)

    def _execute(
        self,
        config: TargetConfig,
        artifact: Artifact,
        url: str,
        username: str,
        secret: str,
        request_headers: Dict[str, str],
        asset: Asset,
        client: requests.Session,
    ) -> UploadResult:
        """Execute the upload request and run the response checker."""
        # requests falls back to chunked encoding for zero-length streams
        body = asset.stream if asset.size else b""

        logger.debug(
            f"executing request: {config.method} {url} (headers: {request_headers})",
            extra={"instance": config.name, "method": config.method, "url": url},
        )
        try:
            response = client.request(
                config.method,
                url,
                data=body,
                headers=request_headers,
                auth=HTTPBasicAuth(username, secret),
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            # a cancelled run explains the failure better than the transport error
            if self._ctx.cancelled:
                return self._upload_failed(
                    config, artifact, FailureKind.CANCELLED, UploadCancelledError(), url, username
                )
            return self._upload_failed(config, artifact, FailureKind.TRANSPORT, TransportError(str(e)), url, username)

        try:
            try:
                self._checker(response)
            except Exception as e:
                return self._upload_failed(config, artifact, FailureKind.REJECTED, e, url, username, response)
        finally:
            response.close()

        logger.info(
            f"{self._kind}: uploaded {artifact.name} to {config.name}",
            extra={"kind": self._kind, "instance": config.name, "mode": config.mode, "artifact": artifact.name},
        )
        return UploadResult.success_result(
            kind=self._kind,
            target_name=config.name,
            artifact_name=artifact.name,
            url=url,
            response=response,
        )

    def _upload_failed(
        self,
        config: TargetConfig,
        artifact: Artifact,
        failure: FailureKind,
        cause: Exception,
        url: Optional[str],
        username: str,
        response: Optional[requests.Response] = None,
    ) -> UploadResult:
        error = UploadError(
            self._kind,
            cause,
            instance=config.name,
            method=config.method,
            url=url,
            username=username,
            status_code=response.status_code if response is not None else None,
        )
        logger.error(
            str(error),
            extra={"kind": self._kind, "instance": config.name, "username": username, "url": url},
        )
        return self._failure(config, artifact, failure, error, url=url, response=response)

    def _failure(
        self,
        config: TargetConfig,
        artifact: Artifact,
        failure: FailureKind,
        error: Exception,
        url: Optional[str] = None,
        response: Optional[requests.Response] = None,
    ) -> UploadResult:
        return UploadResult.failure_result(
            kind=self._kind,
            target_name=config.name,
            artifact_name=artifact.name,
            failure=failure,
            error=error,
            url=url,
            response=response,
        )
