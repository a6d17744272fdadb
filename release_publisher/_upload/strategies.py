"""Default strategies for URL resolution, headers and response checks."""

from typing import Dict

import requests

from release_publisher.artifact import Artifact
from release_publisher.context import RunContext
from release_publisher.exceptions import ResponseValidationError
from release_publisher.template import TemplateRenderer

from .protocol import MODE_BINARY, TargetConfig


def append_artifact_name(target_url: str, artifact: Artifact) -> str:
    """Append ``/<artifact name>`` to a target URL."""
    if not target_url.endswith("/"):
        target_url += "/"
    return target_url + artifact.name


class TemplateTargetURLResolver:
    """
    Expand the configured target as a template.

    The artifact name is appended to the expanded URL unless the target sets
    ``custom_artifact_name``. In binary mode the run's archive replacements
    are applied to the os/arch/arm fields.
    """

    def __call__(self, ctx: RunContext, config: TargetConfig, artifact: Artifact) -> str:
        replacements = ctx.archive_replacements if config.mode == MODE_BINARY else {}
        target_url = TemplateRenderer(ctx).with_artifact(artifact, replacements).apply(config.target)
        if config.custom_artifact_name:
            return target_url
        return append_artifact_name(target_url, artifact)


class ChecksumHeaderGenerator:
    """Send the sha256 digest of the artifact in a configurable header."""

    def __init__(self, header_name: str, algorithm: str = "sha256") -> None:
        self.header_name = header_name
        self.algorithm = algorithm

    def __call__(self, artifact: Artifact) -> Dict[str, str]:
        if not self.header_name:
            return {}
        return {self.header_name: artifact.checksum(self.algorithm)}


def no_headers(artifact: Artifact) -> Dict[str, str]:
    return {}


def check_status_code(response: requests.Response) -> None:
    """Accept any 2xx response."""
    if not 200 <= response.status_code <= 299:
        raise ResponseValidationError(f"unexpected http response status: {response.status_code} {response.reason}")
