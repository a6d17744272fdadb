"""Artifact selection for upload targets."""

from typing import List

from release_publisher.artifact import ArtifactType, Filter, and_, by_ids, by_type, or_
from release_publisher.exceptions import ConfigurationError
from release_publisher.logging_config import logger

from .protocol import MODE_ARCHIVE, MODE_BINARY, TargetConfig


def build_filter(config: TargetConfig, kind: str) -> Filter:
    """
    Build the artifact predicate of a target.

    Checksum and signature files are added to the mode's artifacts when
    enabled. The ID allow-list, when set, restricts the whole selection.

    Args:
        config: Target configuration
        kind: Integration kind used in error messages

    Returns:
        Predicate selecting the artifacts to upload

    Raises:
        ConfigurationError: If the mode is not supported
    """
    filters: List[Filter] = []
    if config.checksum:
        filters.append(by_type(ArtifactType.CHECKSUM))
    if config.signature:
        filters.append(by_type(ArtifactType.SIGNATURE))

    mode = config.mode.lower()
    if mode == MODE_ARCHIVE:
        filters.append(by_type(ArtifactType.UPLOADABLE_ARCHIVE))
        filters.append(by_type(ArtifactType.LINUX_PACKAGE))
    elif mode == MODE_BINARY:
        filters.append(by_type(ArtifactType.UPLOADABLE_BINARY))
    else:
        message = f'{kind}: mode "{mode}" not supported'
        logger.error(message, extra={"kind": kind, "instance": config.name, "mode": mode})
        raise ConfigurationError(message)

    selected = or_(*filters)
    if config.ids:
        selected = and_(selected, by_ids(*config.ids))

    return selected
