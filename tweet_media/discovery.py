"""
Media discovery in tweet embed markup.

Scans oEmbed HTML for every plausible media reference. Each strategy is an
independent pattern scan; results are cumulative and deduplicated per media
kind by URL or by the hash/id a strategy extracted. Discovery does no I/O and
never raises: malformed markup yields an empty or partial list.
"""

import html
import logging
import re
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from .image_resolver import looks_like_image_url
from .models import MediaKind, MediaReference

logger = logging.getLogger(__name__)

CDN_SYNTHESIZED_TEMPLATE = 'https://pbs.twimg.com/media/{}?format=jpg&name=large'

# Unverified guesses used when a status id is the only thing we have
STATUS_GUESS_TEMPLATES = [
    'https://pbs.twimg.com/media/{}?format=jpg&name=large',
    'https://pbs.twimg.com/media/{}.jpg',
    'https://pbs.twimg.com/tweet_video_thumb/{}.jpg',
]

IMG_TAG_PATTERN = re.compile(r'<img\b[^<>]*?\bsrc=["\']([^"\']*twimg\.com[^"\']*)["\'][^<>]*>', re.I)
VIDEO_POSTER_PATTERN = re.compile(r'<video\b[^<>]*?\bposter=["\']([^"\']*twimg\.com[^"\']*)["\'][^<>]*>', re.I)
DATA_ATTRIBUTE_PATTERN = re.compile(r'(?<![\w-])data-[\w-]*=["\']([^"\']*twimg\.com[^"\']*)["\']', re.I)
CDN_URL_PATTERN = re.compile(r'https://pbs\.twimg\.com/media/([A-Za-z0-9_-]+)', re.I)
PIC_LINK_PATTERN = re.compile(r'pic\.twitter\.com/([A-Za-z0-9]+)', re.I)
MEDIA_ID_PATTERN = re.compile(r'media[_-]?ids?["\']?[:\s=]+["\']?([0-9]+)', re.I)
SHORT_LINK_PATTERN = re.compile(
    r'<a\b[^<>]*?\bhref=["\']([^"\']*\bt\.co/[^"\']*)["\'][^<>]*>([^<]*pic\.twitter\.com[^<]*)</a>',
    re.I,
)
STATUS_ID_PATTERN = re.compile(r'status/(\d+)', re.I)
SIZE_PARAM_PATTERN = re.compile(r'([?&]name=)\w+')

# A candidate is (url, dedup key); the key is the hash or id the URL was built from
Candidate = Tuple[str, Optional[str]]


class DiscoveryStrategy(NamedTuple):
    name: str
    kind: MediaKind
    scan: Callable[[str], Iterator[Candidate]]


def normalize_image_size(url: str) -> str:
    """Rewrite a name=<size> query parameter to name=large."""
    return SIZE_PARAM_PATTERN.sub(r'\1large', url)


def _scan_img_tags(markup: str) -> Iterator[Candidate]:
    for match in IMG_TAG_PATTERN.finditer(markup):
        url = html.unescape(match.group(1))
        if looks_like_image_url(url):
            yield normalize_image_size(url), None


def _scan_video_posters(markup: str) -> Iterator[Candidate]:
    for match in VIDEO_POSTER_PATTERN.finditer(markup):
        url = html.unescape(match.group(1))
        if looks_like_image_url(url):
            yield url, None


def _scan_data_attributes(markup: str) -> Iterator[Candidate]:
    for match in DATA_ATTRIBUTE_PATTERN.finditer(markup):
        url = html.unescape(match.group(1))
        if looks_like_image_url(url):
            yield normalize_image_size(url), None


def _scan_cdn_urls(markup: str) -> Iterator[Candidate]:
    for match in CDN_URL_PATTERN.finditer(markup):
        media_hash = match.group(1)
        yield CDN_SYNTHESIZED_TEMPLATE.format(media_hash), media_hash


def _scan_pic_links(markup: str) -> Iterator[Candidate]:
    for match in PIC_LINK_PATTERN.finditer(markup):
        media_hash = match.group(1)
        yield CDN_SYNTHESIZED_TEMPLATE.format(media_hash), media_hash


def _scan_media_ids(markup: str) -> Iterator[Candidate]:
    for match in MEDIA_ID_PATTERN.finditer(markup):
        media_id = match.group(1)
        yield CDN_SYNTHESIZED_TEMPLATE.format(media_id), media_id


def _scan_short_links(markup: str) -> Iterator[Candidate]:
    # Expanded later by the OCR extractor
    for match in SHORT_LINK_PATTERN.finditer(markup):
        yield html.unescape(match.group(1)), None


DISCOVERY_STRATEGIES = [
    DiscoveryStrategy('img_tag', MediaKind.IMAGE, _scan_img_tags),
    DiscoveryStrategy('video_poster', MediaKind.VIDEO, _scan_video_posters),
    DiscoveryStrategy('data_attribute', MediaKind.IMAGE, _scan_data_attributes),
    DiscoveryStrategy('cdn_url', MediaKind.IMAGE, _scan_cdn_urls),
    DiscoveryStrategy('pic_link', MediaKind.IMAGE, _scan_pic_links),
    DiscoveryStrategy('media_id', MediaKind.IMAGE, _scan_media_ids),
    DiscoveryStrategy('short_link', MediaKind.IMAGE, _scan_short_links),
]


def _is_duplicate(items: List[MediaReference], kind: MediaKind, url: str, key: Optional[str]) -> bool:
    for item in items:
        if item.kind != kind:
            continue
        if item.source_url == url:
            return True
        if key and key in item.source_url:
            return True
    return False


def guess_media_from_status(markup: str) -> List[MediaReference]:
    """
    Last resort: unverified CDN guesses built from the tweet's status id.

    Guesses that turn out wrong fail later during OCR and contribute no text.
    """
    match = STATUS_ID_PATTERN.search(markup)
    if not match:
        return []
    status_id = match.group(1)
    return [
        MediaReference(MediaKind.IMAGE, template.format(status_id))
        for template in STATUS_GUESS_TEMPLATES
    ]


def discover_media(embed_html: str) -> List[MediaReference]:
    """
    Find every plausible media reference in tweet embed markup.

    Args:
        embed_html: oEmbed HTML snippet; anything that is not a string is
            treated as markup without media.

    Returns:
        References in discovery order. Status id guesses are appended only
        when no other strategy found anything.
    """
    if not isinstance(embed_html, str) or not embed_html:
        return []

    items: List[MediaReference] = []
    for strategy in DISCOVERY_STRATEGIES:
        found = 0
        for url, key in strategy.scan(embed_html):
            if not url or _is_duplicate(items, strategy.kind, url, key):
                continue
            items.append(MediaReference(strategy.kind, url))
            found += 1
        if found:
            logger.debug("Strategy %s found %d media reference(s)", strategy.name, found)

    if not items:
        items = guess_media_from_status(embed_html)
        if items:
            logger.debug("No media found, using %d status id guesses", len(items))

    return items
