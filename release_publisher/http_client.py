"""HTTP client utilities with consistent user agent."""

from typing import Dict

import requests

from release_publisher import __version__

USER_AGENT = f"release-publisher/{__version__}"

# Upload timeout in seconds
UPLOAD_TIMEOUT = 120


def get_default_headers() -> Dict[str, str]:
    """Get default HTTP headers with user agent."""
    return {"User-Agent": USER_AGENT}


def create_session() -> requests.Session:
    """Create a requests session carrying the default headers."""
    session = requests.Session()
    session.headers.update(get_default_headers())
    return session
