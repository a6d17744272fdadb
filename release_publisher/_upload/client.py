"""HTTP client factory for artifact uploads.

Targets without trusted certificates share one default session. Targets with a
PEM bundle get their own session whose HTTPS adapter verifies servers against
the system trust store plus the configured certificates.
"""

import ssl
import sys
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from release_publisher.http_client import create_session
from release_publisher.logging_config import logger

from .protocol import TargetConfig

# Shared by every target that doesn't customize TLS trust
DEFAULT_SESSION = create_session()


class TrustedCertificatesAdapter(HTTPAdapter):
    """HTTPS adapter verifying peers with a caller-provided SSL context."""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs: Any) -> None:
        self.ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        kwargs["ssl_context"] = self.ssl_context
        super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args: Any, **kwargs: Any) -> Any:
        kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(*args, **kwargs)


def count_certificates(pem: str) -> int:
    """
    Count the certificates that can be loaded from a PEM bundle.

    Args:
        pem: PEM encoded certificates

    Returns:
        Number of certificates loaded, 0 if none could be parsed
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        context.load_verify_locations(cadata=pem)
    except (ssl.SSLError, ValueError):
        return 0
    return context.cert_store_stats()["x509"]


def build_ssl_context(pem: str) -> ssl.SSLContext:
    """
    Build an SSL context trusting the system store and the given certificates.

    On Windows the system store can't always be loaded; the context then only
    trusts the given certificates.

    Raises:
        ssl.SSLError: If the system store can't be loaded on other platforms
    """
    try:
        context = ssl.create_default_context()
    except (ssl.SSLError, OSError) as e:
        if sys.platform != "win32":
            raise
        logger.warning(f"Could not load the system certificate store, trusting only configured certificates: {e}")
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    # already validated by check_config
    context.load_verify_locations(cadata=pem)
    return context


def get_http_client(config: TargetConfig) -> requests.Session:
    """
    Get the HTTP session to use for a target.

    Args:
        config: Target configuration

    Returns:
        The shared default session, or a new session trusting the configured certificates.
        Release it with release_http_client once the target is done.
    """
    if not config.trusted_certificates:
        return DEFAULT_SESSION

    session = create_session()
    session.mount("https://", TrustedCertificatesAdapter(build_ssl_context(config.trusted_certificates)))
    return session


def release_http_client(session: requests.Session) -> None:
    """Close a session obtained from get_http_client unless it is the shared default."""
    if session is not DEFAULT_SESSION:
        session.close()
