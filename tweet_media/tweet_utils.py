"""
Tweet URL and embed text utilities.

Tweet URLs accepted by the fetcher must look like:
    https://twitter.com/<user>/status/<digits>
    https://x.com/<user>/status/<digits>
Query strings and fragments are stripped before validation, and x.com is
rewritten to twitter.com for the oEmbed endpoint.
"""

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup

TWEET_URL_PATTERN = re.compile(r'^https?://(twitter\.com|x\.com)/\w+/status/\d+/?$')
TWEET_ID_PATTERN = re.compile(r'status/(\d+)')
USERNAME_PATTERN = re.compile(r'(?:twitter\.com|x\.com)/([^/?#]+)', re.I)

# Anchors whose text is a media or shortened link, not part of the tweet body
MEDIA_LINK_TEXT = re.compile(r'^\s*(pic\.twitter\.com/|https?://)', re.I)


def validate_tweet_url(url: str) -> bool:
    """
    Check if URL is a single tweet on twitter.com or x.com.

    Examples:
        >>> validate_tweet_url("https://x.com/jack/status/20")
        True

        >>> validate_tweet_url("https://x.com/jack")
        False
    """
    if not url:
        return False
    return bool(TWEET_URL_PATTERN.match(url))


def normalize_tweet_url(url: str) -> str:
    """Rewrite x.com to twitter.com, which the oEmbed API expects."""
    return re.sub(r'^https?://x\.com', 'https://twitter.com', url)


def clean_tweet_url(url: str) -> str:
    """Remove query params and fragments."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))


def extract_tweet_id(url: str) -> Optional[str]:
    match = TWEET_ID_PATTERN.search(url or '')
    return match.group(1) if match else None


def extract_username(author_url: str) -> str:
    """Extract username from a profile URL like https://twitter.com/username."""
    match = USERNAME_PATTERN.search(author_url or '')
    return match.group(1) if match else ''


def _collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def extract_text_from_html(html: str) -> str:
    """
    Extract the tweet text from oEmbed markup.

    The oEmbed blockquote holds the tweet paragraphs followed by an
    "&mdash; Author (@user) date" trailer. Media and shortened links are
    dropped; mentions and hashtags are kept as text.

    Returns:
        Plain tweet text, or the whole markup's text when there is no
        blockquote.
    """
    if not html:
        return ''

    soup = BeautifulSoup(html, 'html.parser')
    blockquote = soup.find('blockquote')

    if blockquote:
        for link in blockquote.find_all('a'):
            if MEDIA_LINK_TEXT.match(link.get_text()):
                link.decompose()

        paragraphs = blockquote.find_all('p')
        if paragraphs:
            text = ' '.join(p.get_text(separator=' ') for p in paragraphs)
        else:
            # Drop the author trailer
            text = blockquote.get_text(separator=' ').rsplit('—', 1)[0]
        return _collapse_whitespace(text)

    for element in soup.find_all(['script', 'style']):
        element.decompose()
    return _collapse_whitespace(soup.get_text(separator=' '))
