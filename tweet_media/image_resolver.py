"""
Direct image URL resolution.

Turns a tweet photo page URL (https://twitter.com/<user>/status/<id>/photo/1)
into a URL that serves raw image bytes. Photo pages are unstable third-party
markup, so the page is scanned with an ordered list of patterns instead of a
DOM parser; the first pattern that matches wins.
"""

import html
import logging
import re
from typing import List, Optional, Pattern, Tuple

import requests

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
BROWSER_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'DNT': '1',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}

PAGE_TIMEOUT = 15
VERIFY_TIMEOUT = 10

PHOTO_PAGE_MARKER = '/photo/'
CDN_MEDIA_TEMPLATE = 'https://pbs.twimg.com/media/{}.jpg'

IMAGE_EXTENSION_PATTERN = re.compile(r'\.(?:jpg|jpeg|png|gif|webp)(?:\?|$)', re.I)
IMAGE_FORMAT_PARAM_PATTERN = re.compile(r'[?&]format=(?:jpg|jpeg|png|gif|webp)\b', re.I)
STATUS_ID_PATTERN = re.compile(r'/status(?:es)?/(\d+)')

# Ordered: the first pattern that matches the page wins
PAGE_IMAGE_MATCHERS: List[Tuple[str, Pattern]] = [
    ('bare_url', re.compile(r'https://pbs\.twimg\.com/media/[^"\'\s<>]+', re.I)),
    ('double_quoted', re.compile(r'"(https://pbs\.twimg\.com/media/[^"]+)"', re.I)),
    ('single_quoted', re.compile(r"'(https://pbs\.twimg\.com/media/[^']+)'", re.I)),
    ('meta_content', re.compile(r'content="(https://pbs\.twimg\.com/media/[^"]+)"', re.I)),
    ('data_attribute', re.compile(r'(?<![\w-])data-[\w-]*="(https://pbs\.twimg\.com/media/[^"]+)"', re.I)),
    ('any_cdn_url', re.compile(r'https://pbs\.twimg\.com/[^"\'\s<>]+', re.I)),
]


def looks_like_image_url(url: str) -> bool:
    """
    Check if URL carries an image file extension or an image format parameter.

    A `format=<ext>` query parameter counts as an image marker even without a
    file extension: the CDN serves `media/<hash>?format=jpg&name=large` as raw
    image bytes, and the discoverer synthesizes URLs in that form. Resolved
    URLs may therefore lack an extension while still naming an image format.
    """
    if not url:
        return False
    return bool(IMAGE_EXTENSION_PATTERN.search(url) or IMAGE_FORMAT_PARAM_PATTERN.search(url))


def is_photo_page_url(url: str) -> bool:
    return PHOTO_PAGE_MARKER in url


def find_image_url_in_page(page_html: str) -> Optional[str]:
    """Return the first CDN image URL found by the ordered page matchers."""
    for name, pattern in PAGE_IMAGE_MATCHERS:
        match = pattern.search(page_html)
        if match:
            found = match.group(1) if pattern.groups else match.group(0)
            logger.debug("Photo page matcher %s found %s", name, found)
            return html.unescape(found)
    return None


def guess_image_url_from_status(photo_page_url: str) -> Optional[str]:
    """
    Best effort guess: build a CDN URL from the status id and verify it.

    The guess is only returned when a HEAD request confirms it exists.
    """
    match = STATUS_ID_PATTERN.search(photo_page_url)
    if not match:
        return None

    candidate = CDN_MEDIA_TEMPLATE.format(match.group(1))
    try:
        response = requests.head(candidate, allow_redirects=True, timeout=VERIFY_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.warning("Verifying guessed image URL %s failed: %s", candidate, e)
        return None

    if not response.ok:
        logger.debug("Guessed image URL %s returned status %s", candidate, response.status_code)
        return None

    return candidate


def fetch_photo_page(url: str) -> Optional[str]:
    """Fetch a photo page with browser-like headers. Returns None on failure."""
    try:
        response = requests.get(url, headers=BROWSER_HEADERS, timeout=PAGE_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.warning("Fetching photo page %s failed: %s", url, e)
        return None

    if not response.ok:
        logger.info("Photo page %s returned status %s", url, response.status_code)
        return None

    return response.text


def resolve_direct_image_url(url: str) -> Optional[str]:
    """
    Resolve a URL to one that serves raw image bytes.

    Order:
    1. URLs that already look like images are returned unchanged.
    2. Photo pages are fetched; if blocked, a verified guess is tried.
    3. The fetched page is scanned with PAGE_IMAGE_MATCHERS.

    Returns None when nothing usable was found. Never raises.
    """
    if not url:
        return None

    if looks_like_image_url(url):
        return url

    if not is_photo_page_url(url):
        logger.debug("Not a photo page URL: %s", url)
        return None

    page_html = fetch_photo_page(url)
    if page_html is None:
        return guess_image_url_from_status(url)

    found = find_image_url_in_page(page_html)
    if found is None:
        logger.debug("No image URL found in photo page %s", url)
        return None

    if not looks_like_image_url(found):
        logger.debug("Photo page match %s is not an image URL", found)
        return None

    return found
