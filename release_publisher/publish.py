"""
Public API for publishing release artifacts.

This module provides a simple interface for uploading the artifacts of a run
to the configured HTTP destinations.

Destinations:
- upload: generic HTTP uploads; credentials from UPLOAD_<NAME>_USERNAME and
  UPLOAD_<NAME>_SECRET environment variables
- artifactory: Artifactory deploys; credentials from ARTIFACTORY_<NAME>_USERNAME
  and ARTIFACTORY_<NAME>_SECRET environment variables

Usage:
    from release_publisher.context import RunContext
    from release_publisher.publish import TargetConfig, publish_all

    ctx = RunContext.from_env(artifacts=inventory)

    # Upload to every configured destination
    reports = publish_all(
        ctx,
        uploads=[TargetConfig(name="production", target="https://uploads.example.com/{{ .Version }}")],
    )
"""

from typing import List, Optional, Sequence

from ._upload import (
    ArtifactoryDestination,
    ArtifactoryInstance,
    DestinationRegistry,
    PublishReport,
    TargetConfig,
    UploadDestination,
    UploadResult,
)
from .console import print_final_failure, print_upload_summary
from .context import RunContext
from .exceptions import PublisherError


def publish_uploads(
    ctx: RunContext,
    uploads: Sequence[TargetConfig],
    puts: Sequence[TargetConfig] = (),
    show_summary: bool = True,
) -> PublishReport:
    """
    Upload the run's artifacts to generic HTTP targets.

    Args:
        ctx: Run context with artifacts and environment
        uploads: Upload targets
        puts: Targets from the deprecated ``puts`` section
        show_summary: Whether to print a summary to the console

    Returns:
        PublishReport with every upload result, or the skip reason

    Raises:
        ConfigurationError: If a target has an unsupported mode
        UploadError: The first upload failure
    """
    registry = DestinationRegistry()
    destination = UploadDestination(ctx, uploads=uploads, puts=puts)
    registry.register(destination)
    return _run(registry, show_summary, destination.name)[0]


def publish_artifactories(
    ctx: RunContext,
    instances: Sequence[ArtifactoryInstance],
    show_summary: bool = True,
) -> PublishReport:
    """
    Deploy the run's artifacts to Artifactory instances.

    Args:
        ctx: Run context with artifacts and environment
        instances: Artifactory instances
        show_summary: Whether to print a summary to the console

    Returns:
        PublishReport with every upload result, or the skip reason
    """
    registry = DestinationRegistry()
    destination = ArtifactoryDestination(ctx, instances)
    registry.register(destination)
    return _run(registry, show_summary, destination.name)[0]


def publish_all(
    ctx: RunContext,
    uploads: Sequence[TargetConfig] = (),
    artifactories: Sequence[ArtifactoryInstance] = (),
    show_summary: bool = True,
) -> List[PublishReport]:
    """
    Publish the run's artifacts to every destination.

    Destinations without configuration are skipped.

    Example:
        reports = publish_all(ctx, uploads=uploads, artifactories=instances)
        for report in reports:
            if report.skipped:
                print(f"{report.destination_name} skipped: {report.skipped_reason}")
    """
    registry = DestinationRegistry()
    registry.register(UploadDestination(ctx, uploads=uploads))
    registry.register(ArtifactoryDestination(ctx, artifactories))
    return _run(registry, show_summary)


def _run(
    registry: DestinationRegistry,
    show_summary: bool,
    destination_name: Optional[str] = None,
) -> List[PublishReport]:
    """Run one destination, or all of them, and print the outcome."""
    try:
        if destination_name is not None:
            reports = [registry.publish(destination_name)]
        else:
            reports = registry.publish_all()
    except PublisherError as e:
        if show_summary:
            print_final_failure(str(e))
        raise

    if show_summary:
        for report in reports:
            print_upload_summary(report)
    return reports


# Re-export key types for convenience
__all__ = [
    "publish_uploads",
    "publish_artifactories",
    "publish_all",
    "TargetConfig",
    "ArtifactoryInstance",
    "PublishReport",
    "UploadResult",
]
