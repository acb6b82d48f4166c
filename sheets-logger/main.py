"""
Sheets Logger Cloud Function

Appends tweet analyses to a Google Sheet and reads them back.

Entry points:
- sheets: POST appends one analysis row, GET lists all rows
- setup_sheets: POST creates a new spreadsheet with the header row
"""

import functions_framework
import json
import os
import sys

# Add shared package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from tweet_media.sheets import (
    DEFAULT_SPREADSHEET_TITLE,
    SheetsConfigError,
    SheetsError,
    append_analysis_row,
    create_spreadsheet,
    list_analysis_rows,
)

REQUIRED_FIELDS = ['username', 'tweetContent', 'sentiment', 'summary', 'tweetUrl']


def _cors_preflight(methods: str) -> tuple:
    headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Methods': methods,
        'Access-Control-Allow-Headers': 'Content-Type',
        'Access-Control-Max-Age': '3600'
    }
    return ('', 204, headers)


def _config_error_message(error: SheetsConfigError) -> str:
    message = str(error)
    if 'SPREADSHEET_ID' in message:
        return 'Spreadsheet not configured - set SPREADSHEET_ID'
    if 'invalid JSON' in message:
        return 'Google Sheets credentials contain invalid JSON - check GOOGLE_SHEETS_CREDENTIALS'
    return 'Google Sheets not configured - set GOOGLE_SHEETS_CREDENTIALS'


@functions_framework.http
def sheets(request):
    """
    Save or list tweet analyses.

    POST JSON input:
    {
        "username": "jack",
        "tweetContent": "just setting up my twttr",
        "sentiment": "neutral",
        "summary": "...",
        "tweetUrl": "https://twitter.com/jack/status/20"
    }
    """
    if request.method == 'OPTIONS':
        return _cors_preflight('GET, POST')

    headers = {'Access-Control-Allow-Origin': '*'}

    try:
        if request.method == 'GET':
            results = list_analysis_rows()
            return (json.dumps({'success': True, 'results': results}), 200, headers)

        request_json = request.get_json(silent=True) or {}
        missing = [field for field in REQUIRED_FIELDS if not request_json.get(field)]
        if missing:
            return (json.dumps({
                'success': False,
                'error': f"Missing required fields: {', '.join(missing)}"
            }), 400, headers)

        append_analysis_row({field: request_json[field] for field in REQUIRED_FIELDS})
        return (json.dumps({'success': True}), 200, headers)

    except SheetsConfigError as e:
        print(f"Sheets configuration error: {e}")
        return (json.dumps({'success': False, 'error': _config_error_message(e)}), 400, headers)
    except SheetsError as e:
        print(f"Sheets error: {e}")
        return (json.dumps({'success': False, 'error': str(e)}), 500, headers)
    except Exception as e:
        print(f"Unexpected sheets error: {e}")
        return (json.dumps({'success': False, 'error': 'Failed to access Google Sheets'}), 500, headers)


@functions_framework.http
def setup_sheets(request):
    """
    Create a spreadsheet for tweet analyses.

    Expected JSON input:
    {
        "title": "Tweet Analysis Results"
    }
    """
    if request.method == 'OPTIONS':
        return _cors_preflight('POST')

    headers = {'Access-Control-Allow-Origin': '*'}
    request_json = request.get_json(silent=True) or {}

    try:
        spreadsheet_id = create_spreadsheet(request_json.get('title') or DEFAULT_SPREADSHEET_TITLE)
        return (json.dumps({
            'success': True,
            'spreadsheetId': spreadsheet_id,
            'message': 'Spreadsheet created successfully. Set SPREADSHEET_ID to this id.'
        }), 200, headers)

    except SheetsConfigError as e:
        print(f"Sheets configuration error: {e}")
        return (json.dumps({'success': False, 'error': _config_error_message(e)}), 400, headers)
    except Exception as e:
        print(f"Error creating spreadsheet: {e}")
        return (json.dumps({'success': False, 'error': 'Failed to create spreadsheet'}), 500, headers)
