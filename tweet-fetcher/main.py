"""
Tweet Fetcher Cloud Function

Fetches a tweet's embed representation and the text inside its media.

Responsibilities:
- Validate and normalize the tweet URL
- Fetch oEmbed markup (with a minimal fallback when the API refuses)
- Find a profile picture for the author
- Extract the rendered tweet text
- Run the media OCR pipeline over the embed markup

Does NOT:
- Summarize or classify the tweet (tweet-analyzer's job)
- Write to Google Sheets (sheets-logger's job)
"""

import functions_framework
import requests
import hashlib
import json
import os
import sys

# Add shared package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from tweet_media.analyzer import analyze_media_content
from tweet_media.tweet_utils import (
    clean_tweet_url,
    extract_text_from_html,
    extract_tweet_id,
    extract_username,
    normalize_tweet_url,
    validate_tweet_url,
)

# Configuration
OEMBED_ENDPOINT = 'https://publish.twitter.com/oembed'
OEMBED_TIMEOUT = 10
AVATAR_TIMEOUT = 5
USER_AGENT = 'Mozilla/5.0 (compatible; TweetMediaAnalyzer/1.0)'
DEFAULT_AVATAR_URL = 'https://abs.twimg.com/sticky/default_profile_images/default_profile_normal.png'
FALLBACK_TWEET_TEXT = 'Tweet content could not be retrieved due to API limitations'


def fetch_oembed(tweet_url: str) -> tuple:
    """Fetch oEmbed data for a tweet. Returns (data, error)."""
    try:
        response = requests.get(
            OEMBED_ENDPOINT,
            params={'url': tweet_url, 'omit_script': 'true', 'theme': 'dark'},
            headers={'User-Agent': USER_AGENT},
            timeout=OEMBED_TIMEOUT
        )
        response.raise_for_status()
        return response.json(), None

    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.HTTPError as e:
        return None, f'HTTP error: {e.response.status_code}'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'
    except ValueError:
        return None, 'oEmbed response is not valid JSON'


def build_fallback_oembed(tweet_url: str) -> dict:
    """Build minimal oEmbed-like data from the URL alone. Returns None if the URL has no user/status."""
    tweet_id = extract_tweet_id(tweet_url)
    username = extract_username(tweet_url)
    if not tweet_id or not username:
        return None

    author_name = username[:1].upper() + username[1:]
    return {
        'html': f'<blockquote><p>{FALLBACK_TWEET_TEXT}</p>&mdash; {author_name} (@{username})</blockquote>',
        'author_name': author_name,
        'author_url': f'https://x.com/{username}',
        'url': tweet_url,
        'width': 500,
        'height': 200,
        'username': username,
    }


def _avatar_exists(url: str) -> bool:
    try:
        response = requests.head(
            url,
            headers={'User-Agent': USER_AGENT},
            timeout=AVATAR_TIMEOUT,
            allow_redirects=True
        )
        return response.ok
    except requests.exceptions.RequestException as e:
        print(f"Avatar check failed for {url}: {e}")
        return False


def fetch_profile_picture(username: str) -> str:
    """Find a profile picture, trying unavatar, GitHub and Gravatar before the default avatar."""
    if not username:
        return None

    email_hash = hashlib.md5(f"{username}@twitter.com".encode('utf-8')).hexdigest()
    candidates = [
        f'https://unavatar.io/twitter/{username}',
        f'https://github.com/{username}.png',
        f'https://www.gravatar.com/avatar/{email_hash}?d=404&s=200',
    ]

    for url in candidates:
        if _avatar_exists(url):
            print(f"Found avatar for {username}: {url}")
            return url

    return DEFAULT_AVATAR_URL


def _error(message: str, status: int, headers: dict) -> tuple:
    return (json.dumps({'success': False, 'error': message}), status, headers)


@functions_framework.http
def fetch_tweet(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "tweetUrl": "https://x.com/user/status/123",
        "options": {
            "skip_media": false
        }
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

    try:
        request_json = request.get_json(silent=True)

        if not isinstance(request_json, dict) or not request_json.get('tweetUrl'):
            return _error('Missing required field: tweetUrl', 400, headers)

        options = request_json.get('options') or {}
        if not isinstance(options, dict):
            return _error('Invalid field: options must be an object', 400, headers)
        skip_media = options.get('skip_media', False)

        cleaned_url = clean_tweet_url(str(request_json['tweetUrl']).strip())
        if not validate_tweet_url(cleaned_url):
            return _error('Invalid tweet URL format. Use twitter.com or x.com URLs', 400, headers)

        tweet_url = normalize_tweet_url(cleaned_url)

        oembed_data, oembed_error = fetch_oembed(tweet_url)
        if oembed_error:
            print(f"oEmbed failed for {tweet_url}: {oembed_error}, using fallback data")
            oembed_data = build_fallback_oembed(tweet_url)
            if not oembed_data:
                return _error('Tweet not found, deleted, private, or API temporarily unavailable', 404, headers)

        embed_html = oembed_data.get('html') or ''
        author_url = oembed_data.get('author_url') or ''
        username = oembed_data.get('username') or extract_username(author_url)

        profile_picture = fetch_profile_picture(username)
        text = extract_text_from_html(embed_html) if embed_html else FALLBACK_TWEET_TEXT

        media_content = []
        media_text = ''
        if not skip_media:
            media_result = analyze_media_content(embed_html)
            media_content = [item.to_dict() for item in media_result.items]
            media_text = media_result.combined_text

        tweet = {
            'html': embed_html,
            'authorName': oembed_data.get('author_name') or username,
            'authorUrl': author_url,
            'username': username,
            'url': oembed_data.get('url') or tweet_url,
            'text': text,
            'width': oembed_data.get('width') or 500,
            'height': oembed_data.get('height') or 200,
            'profilePicture': profile_picture,
            'mediaContent': media_content,
            'mediaText': media_text,
        }

        return (json.dumps({'success': True, 'tweet': tweet}), 200, headers)

    except Exception as e:
        print(f"Error fetching tweet: {e}")
        return _error(
            'Failed to fetch tweet data. The tweet may be private, deleted, or the API is temporarily unavailable',
            500,
            headers
        )
