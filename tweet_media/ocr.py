"""
OCR text extraction for discovered media.

extract_text() is total: every failure path returns an empty string so that
one bad media item never aborts the batch it belongs to.
"""

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Optional

import pytesseract
import requests
from PIL import Image

from .image_resolver import looks_like_image_url, resolve_direct_image_url
from .link_resolver import expand_link, is_shortened_link
from .models import MediaKind, MediaReference

logger = logging.getLogger(__name__)

OCR_LANGUAGE = 'eng'
IMAGE_FETCH_TIMEOUT = 15
VIDEO_EXTENSION_PATTERN = re.compile(r'\.(?:mp4|mov)(?=\?|$)', re.I)


def fetch_image_bytes(url: str, timeout: float = IMAGE_FETCH_TIMEOUT) -> Optional[bytes]:
    """Download image bytes. Returns None on failure or an empty body."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.warning("Fetching image %s failed: %s", url, e)
        return None

    if not response.ok:
        logger.warning("Fetching image %s returned status %s", url, response.status_code)
        return None

    if not response.content:
        logger.info("Image %s has an empty body", url)
        return None

    return response.content


def recognize_text(data: bytes, lang: str = OCR_LANGUAGE) -> str:
    """Run tesseract on raw image bytes and return the trimmed text."""
    with Image.open(BytesIO(data)) as image:
        text = pytesseract.image_to_string(image, lang=lang)
    return (text or '').strip()


def video_still_url(url: str) -> str:
    """Rewrite a video URL to the CDN's still frame convention (.mp4 -> .jpg)."""
    return VIDEO_EXTENSION_PATTERN.sub('.jpg', url)


@dataclass
class ExtractionServices:
    """Network and OCR collaborators used by the extractor; swap in fakes for tests."""

    link_expander: Callable[[str], Optional[str]] = expand_link
    image_resolver: Callable[[str], Optional[str]] = resolve_direct_image_url
    image_fetcher: Callable[[str], Optional[bytes]] = fetch_image_bytes
    recognizer: Callable[[bytes], str] = recognize_text


def _extract_from_url(url: str, services: ExtractionServices) -> str:
    if is_shortened_link(url):
        expanded = services.link_expander(url)
        if not expanded:
            logger.info("Could not expand %s, skipping OCR", url)
            return ''
        url = expanded

    direct_url = services.image_resolver(url)
    if not direct_url:
        logger.info("No direct image URL for %s, skipping OCR", url)
        return ''

    if not looks_like_image_url(direct_url):
        logger.info("Resolved URL %s is not an image, skipping OCR", direct_url)
        return ''

    data = services.image_fetcher(direct_url)
    if not data:
        return ''

    return (services.recognizer(data) or '').strip()


def extract_text(reference: MediaReference, services: Optional[ExtractionServices] = None) -> str:
    """
    Extract text from a media reference via OCR.

    Steps: expand shortened links, resolve a direct image URL, re-check that
    it is an image, fetch the bytes, recognize. Video references are first
    rewritten to their still frame.

    Returns:
        Recognized text, or '' when any step failed.
    """
    services = services or ExtractionServices()
    url = reference.source_url
    if reference.kind == MediaKind.VIDEO:
        url = video_still_url(url)

    try:
        return _extract_from_url(url, services)
    except Exception as e:
        logger.warning("OCR failed for %s: %s", reference.source_url, e)
        return ''
