"""Upload orchestrator: fans artifacts out to their targets."""

import threading
from typing import Callable, List, Optional, Sequence, Tuple

import requests

from release_publisher.artifact import Artifact, Filter
from release_publisher.context import RunContext
from release_publisher.exceptions import PublishingDisabledError
from release_publisher.logging_config import logger

from .assets import open_asset
from .client import get_http_client, release_http_client
from .filters import build_filter
from .group import ConcurrencyGroup
from .protocol import AssetOpener, ResponseChecker, TargetConfig
from .result import UploadResult
from .uploader import ArtifactUploader


class UploadOrchestrator:
    """
    Publishes the run's artifacts to a list of targets.

    Targets are processed one after another in the given order. The artifacts
    of one target are uploaded concurrently, at most ``ctx.parallelism`` at a
    time. Every upload of a target runs to completion; the first failure is
    raised once the batch is done and later targets are not processed. Once
    the run is cancelled, uploads that haven't started are recorded as
    cancelled failures.

    Example:
        orchestrator = UploadOrchestrator(ctx, kind="upload", checker=check_status_code)
        results = orchestrator.publish(configs)
    """

    def __init__(
        self,
        ctx: RunContext,
        kind: str,
        checker: ResponseChecker,
        asset_opener: AssetOpener = open_asset,
        client_factory: Callable[[TargetConfig], requests.Session] = get_http_client,
        uploader: Optional[ArtifactUploader] = None,
    ) -> None:
        """
        Initialize the UploadOrchestrator.

        Args:
            ctx: Run context
            kind: Integration kind, used in env var names and messages
            checker: Response checker applied to every upload
            asset_opener: Opens artifact content for upload
            client_factory: Returns the HTTP session for a target
            uploader: Optional custom uploader (overrides the other params)
        """
        self._ctx = ctx
        self._kind = kind
        self._client_factory = client_factory
        self._uploader = uploader or ArtifactUploader(
            ctx,
            kind,
            checker,
            asset_opener=asset_opener,
            client_factory=client_factory,
        )
        self._lock = threading.Lock()
        self._results: List[UploadResult] = []

    @property
    def results(self) -> List[UploadResult]:
        """Outcomes of every upload attempted so far, including failed ones."""
        with self._lock:
            return list(self._results)

    def publish(self, configs: Sequence[TargetConfig]) -> List[UploadResult]:
        """
        Upload matching artifacts to every target.

        Args:
            configs: Defaulted and validated target configurations

        Returns:
            UploadResult of every upload

        Raises:
            PublishingDisabledError: If publishing is disabled for the run
            ConfigurationError: If a target has an unsupported mode
            UploadError: The first upload failure
        """
        if self._ctx.skip_publish:
            raise PublishingDisabledError()

        # Every filter is built before the first request goes out
        batches: List[Tuple[TargetConfig, Filter]] = [(config, build_filter(config, self._kind)) for config in configs]

        for config, selected in batches:
            self._upload_with_filter(config, selected)

        return self.results

    def _upload_with_filter(self, config: TargetConfig, selected: Filter) -> None:
        artifacts = self._ctx.artifacts.filter(selected)
        logger.debug(
            f"will upload {len(artifacts)} artifacts to {config.name}",
            extra={"kind": self._kind, "instance": config.name},
        )
        if not artifacts:
            return

        client = self._target_client(config)
        try:
            group = ConcurrencyGroup(self._ctx.parallelism)
            for artifact in artifacts:
                group.go(self._upload_one, config, artifact, client)
            group.wait()
        finally:
            if client is not None:
                release_http_client(client)

    def _target_client(self, config: TargetConfig) -> Optional[requests.Session]:
        """Build the session shared by every upload of a target."""
        try:
            return self._client_factory(config)
        except Exception as e:
            # each upload then reports the failure as a transport error
            logger.debug(f"could not build the http client of {config.name}: {e}", extra={"instance": config.name})
            return None

    def _upload_one(self, config: TargetConfig, artifact: Artifact, client: Optional[requests.Session]) -> None:
        result = self._uploader.upload(config, artifact, client)
        with self._lock:
            self._results.append(result)
        if not result.success and result.error is not None:
            raise result.error


def upload(
    ctx: RunContext,
    configs: Sequence[TargetConfig],
    kind: str,
    checker: ResponseChecker,
) -> List[UploadResult]:
    """
    Upload matching artifacts to every target.

    Shorthand for ``UploadOrchestrator(ctx, kind, checker).publish(configs)``.
    """
    return UploadOrchestrator(ctx, kind, checker).publish(configs)
