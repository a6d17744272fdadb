"""Target configuration validation and credential resolution.

Credentials are looked up in the run environment:

    <KIND>_<NAME>_USERNAME: username, when the config doesn't set one
    <KIND>_<NAME>_SECRET: password or API key, only ever read from the environment

KIND and NAME are upper-cased, e.g. UPLOAD_PRODUCTION_SECRET.
"""

from release_publisher.context import RunContext
from release_publisher.exceptions import PipeSkipError

from .client import count_certificates
from .protocol import VALID_MODES, TargetConfig


def misconfigured(kind: str, config: TargetConfig, reason: str) -> PipeSkipError:
    """Build the skip error reported for an unusable target."""
    return PipeSkipError(f"{kind} section '{config.name}' is not configured properly ({reason})")


def username_env_key(kind: str, config: TargetConfig) -> str:
    return f"{kind.upper()}_{config.name.upper()}_USERNAME"


def secret_env_key(kind: str, config: TargetConfig) -> str:
    return f"{kind.upper()}_{config.name.upper()}_SECRET"


def resolve_username(ctx: RunContext, config: TargetConfig, kind: str) -> str:
    """
    Resolve the username of a target.

    Raises:
        PipeSkipError: If neither the config nor the environment provides one
    """
    if config.username:
        return config.username
    key = username_env_key(kind, config)
    user = ctx.env.get(key)
    if user is None:
        raise misconfigured(kind, config, f"missing username or {key} environment variable")
    return user


def resolve_secret(ctx: RunContext, config: TargetConfig, kind: str) -> str:
    """
    Resolve the secret of a target from the environment.

    Raises:
        PipeSkipError: If the secret environment variable is missing
    """
    key = secret_env_key(kind, config)
    secret = ctx.env.get(key)
    if secret is None:
        raise misconfigured(kind, config, f"missing {key} environment variable")
    return secret


def check_config(ctx: RunContext, config: TargetConfig, kind: str) -> None:
    """
    Validate a target configuration before any upload starts.

    Args:
        ctx: Run context providing the environment
        config: Defaulted target configuration
        kind: Integration kind, e.g. "upload" or "artifactory"

    Raises:
        PipeSkipError: Describing the first problem found
    """
    if not config.target:
        raise misconfigured(kind, config, "missing target")

    if not config.name:
        raise misconfigured(kind, config, "missing name")

    if config.mode not in VALID_MODES:
        raise misconfigured(kind, config, "mode must be 'binary' or 'archive'")

    resolve_username(ctx, config, kind)
    resolve_secret(ctx, config, kind)

    if config.trusted_certificates and count_certificates(config.trusted_certificates) == 0:
        raise misconfigured(
            kind, config, "no certificate could be added from the specified trusted_certificates configuration"
        )
