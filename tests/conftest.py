"""
Shared pytest fixtures for Tweet Media Analyzer tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path

from tweet_media.ocr import ExtractionServices

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function modules with unique names at module load time
_tweet_fetcher_module = _load_module_from_path(
    'tweet_fetcher_main',
    PROJECT_ROOT / 'tweet-fetcher' / 'main.py'
)

_tweet_analyzer_module = _load_module_from_path(
    'tweet_analyzer_main',
    PROJECT_ROOT / 'tweet-analyzer' / 'main.py'
)

_sheets_logger_module = _load_module_from_path(
    'sheets_logger_main',
    PROJECT_ROOT / 'sheets-logger' / 'main.py'
)


# ============================================================================
# Cloud Function Fixtures
# ============================================================================

@pytest.fixture
def tweet_fetcher_module():
    return _tweet_fetcher_module


@pytest.fixture
def tweet_analyzer_module():
    return _tweet_analyzer_module


@pytest.fixture
def sheets_logger_module():
    return _sheets_logger_module


@pytest.fixture
def fetch_tweet():
    """Returns main entry point from tweet-fetcher."""
    return _tweet_fetcher_module.fetch_tweet


@pytest.fixture
def analyze_tweet():
    """Returns main entry point from tweet-analyzer."""
    return _tweet_analyzer_module.analyze_tweet


@pytest.fixture
def sheets_handler():
    """Returns the sheets entry point from sheets-logger."""
    return _sheets_logger_module.sheets


@pytest.fixture
def setup_sheets():
    """Returns the setup_sheets entry point from sheets-logger."""
    return _sheets_logger_module.setup_sheets


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data or {}
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


# ============================================================================
# Media Pipeline Fixtures
# ============================================================================

@pytest.fixture
def fake_services():
    """
    Factory for deterministic ExtractionServices.

    The fake fetcher returns the URL itself as bytes so the fake recognizer
    can look up per-URL text. Every call is recorded in services.calls.

    Args:
        texts: dict of direct image URL -> recognized text
        expanded: dict of short URL -> expanded URL (missing means failure)
        resolve: optional replacement for the image resolver
    """
    def factory(texts=None, expanded=None, resolve=None):
        texts = texts or {}
        expanded = expanded or {}
        calls = {'expand': [], 'resolve': [], 'fetch': [], 'recognize': []}

        def link_expander(url):
            calls['expand'].append(url)
            return expanded.get(url)

        def image_resolver(url):
            calls['resolve'].append(url)
            if resolve is not None:
                return resolve(url)
            return url

        def image_fetcher(url):
            calls['fetch'].append(url)
            return url.encode('utf-8')

        def recognizer(data):
            url = data.decode('utf-8')
            calls['recognize'].append(url)
            return texts.get(url, '')

        services = ExtractionServices(
            link_expander=link_expander,
            image_resolver=image_resolver,
            image_fetcher=image_fetcher,
            recognizer=recognizer,
        )
        services.calls = calls
        return services

    return factory


@pytest.fixture
def sample_embed_html():
    """oEmbed markup of a tweet with one photo, as returned by publish.twitter.com."""
    return (
        '<blockquote class="twitter-tweet" data-theme="dark">'
        '<p lang="en" dir="ltr">Big news today! '
        '<a href="https://twitter.com/hashtag/launch?src=hash&amp;ref_src=twsrc%5Etfw">#launch</a> '
        '<a href="https://t.co/Xy12AbCd">pic.twitter.com/Ab34EfGh</a></p>'
        '&mdash; Jack (@jack) '
        '<a href="https://twitter.com/jack/status/20?ref_src=twsrc%5Etfw">March 21, 2006</a>'
        '</blockquote>\n'
    )


@pytest.fixture
def oembed_response(sample_embed_html):
    """Sample oEmbed API response."""
    return {
        'url': 'https://twitter.com/jack/status/20',
        'author_name': 'jack',
        'author_url': 'https://twitter.com/jack',
        'html': sample_embed_html,
        'width': 550,
        'height': None,
        'type': 'rich',
        'provider_name': 'Twitter',
    }
