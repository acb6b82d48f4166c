"""
Tweet Analyzer Cloud Function

Summarizes a tweet and labels its sentiment using Gemini.

Input is the tweet text produced by tweet-fetcher, optionally with the text
recognized in its images (mediaText).
"""

import functions_framework
import google.generativeai as genai
import json
import os
import sys

# Add shared package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from tweet_media.analysis_utils import build_analysis_prompt, parse_analysis_response, validate_analysis

# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash')
GENERATION_CONFIG = {
    'temperature': 0.3,  # Lower temperature for consistent labels
    'max_output_tokens': 300,
}


def classify_tweet(text: str, author_name: str = None, media_text: str = '') -> dict:
    """
    Generate summary, sentiment and confidence for a tweet.

    Raises:
        ValueError: If Gemini returns no usable analysis
    """
    genai.configure(api_key=GEMINI_API_KEY)
    model = genai.GenerativeModel(GEMINI_MODEL)

    prompt = build_analysis_prompt(text, author_name, media_text)
    response = model.generate_content(prompt, generation_config=GENERATION_CONFIG)

    response_text = (response.text or '').strip()
    if not response_text:
        raise ValueError('No response from Gemini')

    try:
        return validate_analysis(parse_analysis_response(response_text))
    except ValueError:
        print(f"Failed to parse Gemini response: {response_text[:500]}")
        raise


@functions_framework.http
def analyze_tweet(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "text": "tweet text",
        "authorName": "Author",
        "mediaText": "[image]: text found in images"
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'POST',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    headers = {'Access-Control-Allow-Origin': '*'}

    request_json = request.get_json(silent=True)

    if not request_json or not request_json.get('text'):
        return (json.dumps({'success': False, 'error': 'Missing required field: text'}), 400, headers)

    if not GEMINI_API_KEY:
        return (json.dumps({'success': False, 'error': 'GEMINI_API_KEY not configured'}), 500, headers)

    try:
        analysis = classify_tweet(
            request_json['text'],
            request_json.get('authorName'),
            request_json.get('mediaText') or ''
        )
        return (json.dumps({'success': True, 'analysis': analysis}), 200, headers)

    except Exception as e:
        print(f"Error analyzing tweet: {e}")

        if 'API key' in str(e) or 'API_KEY' in str(e):
            return (json.dumps({'success': False, 'error': 'Gemini API key invalid or missing'}), 401, headers)

        return (json.dumps({'success': False, 'error': 'Failed to analyze tweet with AI'}), 500, headers)
