"""Run context shared by every publishing step."""

import os
import threading
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .artifact import ArtifactInventory

# Default number of concurrent uploads per target
DEFAULT_PARALLELISM = 4

ENV_PREFIX = "PUBLISHER"


@dataclass
class RunContext:
    """
    Run-wide state consumed by the publisher.

    Attributes:
        artifacts: Inventory of artifacts built by the run
        env: Environment map used for credential lookup
        parallelism: Maximum number of concurrent uploads per target
        skip_publish: Whether publishing is disabled for this run
        cancel_event: Set when the run is being cancelled
        project_name: Project name exposed to URL templates
        version: Release version exposed to URL templates
        tag: Release tag exposed to URL templates
        archive_replacements: Os/arch/arm replacements used by binary mode templates
    """

    artifacts: ArtifactInventory = field(default_factory=ArtifactInventory)
    env: Mapping[str, str] = field(default_factory=dict)
    parallelism: int = DEFAULT_PARALLELISM
    skip_publish: bool = False
    cancel_event: threading.Event = field(default_factory=threading.Event)
    project_name: str = ""
    version: str = ""
    tag: str = ""
    archive_replacements: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {self.parallelism}")

    @property
    def cancelled(self) -> bool:
        """Check whether the run has been cancelled."""
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Signal cancellation to every in-flight upload."""
        self.cancel_event.set()

    @classmethod
    def from_env(
        cls,
        artifacts: Optional[ArtifactInventory] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "RunContext":
        """
        Build a run context from PUBLISHER_* environment variables.

        Environment Variables:
            PUBLISHER_SKIP_PUBLISH: Disable publishing (default: false)
            PUBLISHER_PARALLELISM: Concurrent uploads per target (default: 4)
            PUBLISHER_PROJECT_NAME: Project name for templates
            PUBLISHER_VERSION: Release version for templates
            PUBLISHER_TAG: Release tag for templates

        Args:
            artifacts: Artifact inventory for the run
            env: Environment map, defaults to a snapshot of os.environ

        Returns:
            RunContext populated from the environment
        """
        env = dict(os.environ) if env is None else dict(env)

        parallelism_value = _get_env(env, "PARALLELISM")
        try:
            parallelism = int(parallelism_value) if parallelism_value else DEFAULT_PARALLELISM
        except ValueError as e:
            raise ValueError(f"{ENV_PREFIX}_PARALLELISM must be an integer, got: {parallelism_value}") from e

        return cls(
            artifacts=artifacts if artifacts is not None else ArtifactInventory(),
            env=env,
            parallelism=parallelism,
            skip_publish=_get_env_bool(env, "SKIP_PUBLISH", default=False),
            project_name=_get_env(env, "PROJECT_NAME") or "",
            version=_get_env(env, "VERSION") or "",
            tag=_get_env(env, "TAG") or "",
        )


def _get_env(env: Mapping[str, str], key: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with prefix."""
    return env.get(f"{ENV_PREFIX}_{key}", default)


def _get_env_bool(env: Mapping[str, str], key: str, default: bool = False) -> bool:
    """Get boolean environment variable with prefix."""
    value = _get_env(env, key)
    if value is None:
        return default
    return value.lower() in ("true", "yes", "1", "on")
