"""Generic HTTP upload integration.

Uploads artifacts to any HTTP server accepting a raw request body, by default
with PUT. Every target is described by a TargetConfig.

Credentials via environment variables (NAME is the upper-cased target name):
    UPLOAD_<NAME>_USERNAME: Username, when the target doesn't set one
    UPLOAD_<NAME>_SECRET: Password (required)

The deprecated ``puts`` list is still accepted and merged into ``uploads``.
"""

from typing import Callable, List, Sequence

import requests

from release_publisher.console import gha_warning
from release_publisher.context import RunContext
from release_publisher.exceptions import PipeSkipError
from release_publisher.logging_config import logger

from ..assets import open_asset
from ..client import get_http_client
from ..config import check_config, misconfigured
from ..orchestrator import UploadOrchestrator
from ..protocol import AssetOpener, TargetConfig
from ..result import UploadResult
from ..strategies import check_status_code

KIND = "upload"


class UploadDestination:
    """
    Publishes artifacts to generic HTTP upload targets.

    Example:
        destination = UploadDestination(ctx, uploads=[TargetConfig(name="production", target="https://up.example.com")])
        destination.default()
        results = destination.publish()
    """

    def __init__(
        self,
        ctx: RunContext,
        uploads: Sequence[TargetConfig] = (),
        puts: Sequence[TargetConfig] = (),
        asset_opener: AssetOpener = open_asset,
        client_factory: Callable[[TargetConfig], requests.Session] = get_http_client,
    ) -> None:
        self._ctx = ctx
        self._uploads: List[TargetConfig] = list(uploads)
        self._puts: List[TargetConfig] = list(puts)
        self._orchestrator = UploadOrchestrator(
            ctx,
            KIND,
            check_status_code,
            asset_opener=asset_opener,
            client_factory=client_factory,
        )

    @property
    def name(self) -> str:
        return KIND

    @property
    def configs(self) -> List[TargetConfig]:
        return list(self._uploads)

    @property
    def results(self) -> List[UploadResult]:
        return self._orchestrator.results

    def default(self) -> None:
        """Merge deprecated puts into uploads and default mode to archive and method to PUT."""
        if self._puts:
            message = "DEPRECATED: 'puts' is deprecated, use 'uploads' instead"
            logger.warning(message)
            gha_warning(message, title="Deprecated configuration")
            self._uploads.extend(self._puts)
            self._puts = []

        self._uploads = [config.with_defaults() for config in self._uploads]

    def publish(self) -> List[UploadResult]:
        """
        Upload artifacts to every configured target.

        Every target is checked before the first upload starts.

        Returns:
            UploadResult of every upload

        Raises:
            PipeSkipError: If no target is configured or a target is unusable
            UploadError: The first upload failure
        """
        if not self._uploads:
            raise PipeSkipError("uploads section is not configured")

        for config in self._uploads:
            if not config.target:
                raise misconfigured(KIND, config, "missing target")

        for config in self._uploads:
            check_config(self._ctx, config, KIND)

        return self._orchestrator.publish(self._uploads)
