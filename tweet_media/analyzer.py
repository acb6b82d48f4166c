"""Media analysis orchestration: discover, extract, aggregate."""

import logging
from typing import Optional

from .discovery import discover_media
from .models import MediaAnalysisResult
from .ocr import ExtractionServices, extract_text

logger = logging.getLogger(__name__)


def analyze_media_content(embed_html: str, services: Optional[ExtractionServices] = None) -> MediaAnalysisResult:
    """
    Run OCR over every media reference found in tweet embed markup.

    Items are processed one at a time to keep outbound traffic to the CDN
    free of bursts. Items whose extraction failed stay in the result without
    text. Never raises.

    Args:
        embed_html: oEmbed HTML of the tweet
        services: Collaborators for link expansion, resolution, fetching and OCR

    Returns:
        MediaAnalysisResult with every discovered item and the combined text
    """
    services = services or ExtractionServices()
    items = discover_media(embed_html)

    for item in items:
        text = extract_text(item, services)
        if text:
            item.extracted_text = text
            logger.debug("Extracted %d chars from %s", len(text), item.source_url)
        else:
            logger.debug("No text from %s %s", item.kind.value, item.source_url)

    result = MediaAnalysisResult(items=items)
    logger.info(
        "Media analysis complete: %d item(s), %d chars of text",
        len(items), len(result.combined_text),
    )
    return result
