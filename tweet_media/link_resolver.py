"""Expansion of shortened redirect links (t.co and friends)."""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

SHORTENER_HOSTS = {'t.co', 'bit.ly', 'buff.ly', 'ow.ly'}
EXPAND_TIMEOUT = 10


def is_shortened_link(url: str) -> bool:
    """Check if URL points at a known link shortener."""
    if not url:
        return False
    host = urlparse(url).netloc.lower()
    if host.startswith('www.'):
        host = host[4:]
    return host in SHORTENER_HOSTS


def expand_link(short_url: str, timeout: float = EXPAND_TIMEOUT) -> Optional[str]:
    """
    Follow redirects with a HEAD request and return the final URL.

    Returns None on network errors, timeouts and non-2xx responses; callers
    skip the media item instead of retrying.
    """
    try:
        response = requests.head(short_url, allow_redirects=True, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.warning("Failed to expand %s: %s", short_url, e)
        return None

    if not response.ok:
        logger.warning("Expanding %s returned status %s", short_url, response.status_code)
        return None

    logger.debug("Expanded %s to %s", short_url, response.url)
    return response.url
