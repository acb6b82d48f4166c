"""
LLM analysis utilities for tweet summaries.

Builds the summary/sentiment prompt and parses and validates the JSON reply
from Gemini. The reply must carry a summary; sentiment and confidence are
coerced into their allowed ranges.
"""

import json
import re
from typing import Dict, Optional

SENTIMENTS = ('positive', 'negative', 'neutral')
DEFAULT_SENTIMENT = 'neutral'
DEFAULT_CONFIDENCE = 0.5

# Keep prompts bounded for long OCR output
MAX_MEDIA_TEXT_CHARS = 4000


def build_analysis_prompt(text: str, author_name: Optional[str] = None, media_text: str = '') -> str:
    """
    Build the summary/sentiment prompt for a tweet.

    Args:
        text: Tweet text
        author_name: Display name of the author
        media_text: Text recognized in the tweet's images, if any

    Returns:
        Prompt asking for JSON with summary, sentiment and confidence
    """
    media_section = ''
    if media_text:
        media_section = f"""
Text found in the tweet's images:
\"\"\"{media_text[:MAX_MEDIA_TEXT_CHARS]}\"\"\"
"""

    return f"""Analyze this tweet and provide:
1. A brief summary (1-2 sentences)
2. Overall sentiment (positive, negative, or neutral)
3. Confidence level for the sentiment (0-1 scale)

Tweet by {author_name or 'Unknown'}:
"{text}"
{media_section}
Respond in this exact JSON format:
{{
  "summary": "your summary here",
  "sentiment": "positive|negative|neutral",
  "confidence": 0.85
}}
"""


def parse_analysis_response(response_text: str) -> Dict:
    """
    Extract the JSON object from an LLM reply.

    Handles replies wrapped in markdown code fences or surrounded by prose.

    Raises:
        ValueError: If the reply holds no parseable JSON object
    """
    if not response_text:
        raise ValueError('Empty response from model')

    json_match = re.search(r'\{[\s\S]*\}', response_text)
    if not json_match:
        raise ValueError('No JSON object in model response')

    try:
        parsed = json.loads(json_match.group())
    except json.JSONDecodeError as e:
        raise ValueError(f'Invalid JSON in model response: {e}') from e

    if not isinstance(parsed, dict):
        raise ValueError('Model response JSON is not an object')

    return parsed


def _clamp_confidence(value) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if confidence != confidence:  # NaN
        return DEFAULT_CONFIDENCE
    return min(max(confidence, 0.0), 1.0)


def validate_analysis(parsed: Dict) -> Dict:
    """
    Validate a parsed analysis.

    Returns:
        Dict with:
            summary: str
            sentiment: one of SENTIMENTS (unknown values become neutral)
            confidence: float clamped to [0, 1]

    Raises:
        ValueError: If the summary is missing or empty
    """
    summary = parsed.get('summary')
    if not isinstance(summary, str) or not summary.strip():
        raise ValueError('Model response is missing a summary')

    sentiment = str(parsed.get('sentiment') or '').strip().lower()
    if sentiment not in SENTIMENTS:
        sentiment = DEFAULT_SENTIMENT

    return {
        'summary': summary.strip(),
        'sentiment': sentiment,
        'confidence': _clamp_confidence(parsed.get('confidence')),
    }
