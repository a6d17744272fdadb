"""Destination registry for running publishing integrations."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from release_publisher.exceptions import PipeSkipError
from release_publisher.logging_config import logger

from .protocol import Destination
from .result import UploadResult


@dataclass
class PublishReport:
    """
    Outcome of running one destination.

    Attributes:
        destination_name: Integration kind of the destination
        results: UploadResult of every upload the destination performed
        skipped_reason: Why the destination was skipped, if it was
    """

    destination_name: str
    results: List[UploadResult] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class DestinationRegistry:
    """
    Registry for publishing destinations.

    Destinations run in registration order. A destination raising
    PipeSkipError is reported as skipped and the next one still runs; any
    other error stops the run.

    Example:
        registry = DestinationRegistry()
        registry.register(UploadDestination(ctx, uploads=[...]))
        registry.register(ArtifactoryDestination(ctx, instances=[...]))

        reports = registry.publish_all()
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._destinations: Dict[str, Destination] = {}

    def register(self, destination: Destination) -> None:
        """
        Register a destination.

        Args:
            destination: Destination implementation to register
        """
        self._destinations[destination.name] = destination
        logger.debug(f"Registered destination: {destination.name}")

    def publish(self, destination_name: str) -> PublishReport:
        """
        Run a single destination.

        Args:
            destination_name: Name of destination to run

        Returns:
            PublishReport of the destination

        Raises:
            ValueError: If destination not found
        """
        destination = self._destinations.get(destination_name)
        if not destination:
            available = list(self._destinations.keys())
            raise ValueError(f"Destination '{destination_name}' not found. Available destinations: {available}")

        return self._execute(destination)

    def publish_all(self) -> List[PublishReport]:
        """
        Run every registered destination in registration order.

        Returns:
            PublishReport of each destination
        """
        if not self._destinations:
            logger.warning("No destinations registered for publishing")
            return []

        return [self._execute(destination) for destination in self._destinations.values()]

    def _execute(self, destination: Destination) -> PublishReport:
        """Default, then publish with a specific destination."""
        logger.info(f"Publishing to destination: {destination.name}")
        destination.default()
        try:
            results = destination.publish()
        except PipeSkipError as e:
            logger.info(f"Skipping {destination.name}: {e}")
            return PublishReport(destination_name=destination.name, skipped_reason=str(e))

        logger.info(f"Published {len(results)} artifact(s) to {destination.name}")
        return PublishReport(destination_name=destination.name, results=results)

