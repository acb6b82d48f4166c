"""Shared tweet media pipeline and helpers for the Tweet Media Analyzer functions."""

from .models import (
    MediaKind,
    MediaReference,
    MediaAnalysisResult,
)

from .link_resolver import (
    is_shortened_link,
    expand_link,
)

from .image_resolver import (
    looks_like_image_url,
    resolve_direct_image_url,
)

from .discovery import (
    DISCOVERY_STRATEGIES,
    normalize_image_size,
    discover_media,
)

from .ocr import (
    ExtractionServices,
    fetch_image_bytes,
    recognize_text,
    extract_text,
)

from .analyzer import analyze_media_content

from .tweet_utils import (
    validate_tweet_url,
    normalize_tweet_url,
    clean_tweet_url,
    extract_tweet_id,
    extract_username,
    extract_text_from_html,
)

from .analysis_utils import (
    SENTIMENTS,
    build_analysis_prompt,
    parse_analysis_response,
    validate_analysis,
)

__all__ = [
    # Data model
    'MediaKind',
    'MediaReference',
    'MediaAnalysisResult',
    # Media pipeline
    'is_shortened_link',
    'expand_link',
    'looks_like_image_url',
    'resolve_direct_image_url',
    'DISCOVERY_STRATEGIES',
    'normalize_image_size',
    'discover_media',
    'ExtractionServices',
    'fetch_image_bytes',
    'recognize_text',
    'extract_text',
    'analyze_media_content',
    # Tweet utilities
    'validate_tweet_url',
    'normalize_tweet_url',
    'clean_tweet_url',
    'extract_tweet_id',
    'extract_username',
    'extract_text_from_html',
    # Analysis utilities
    'SENTIMENTS',
    'build_analysis_prompt',
    'parse_analysis_response',
    'validate_analysis',
]
