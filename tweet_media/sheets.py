"""
Google Sheets log of tweet analyses.

Append-only: one row per analysis, laid out as HEADER_ROW. Credentials come
from GOOGLE_SHEETS_CREDENTIALS (service account JSON) and the target sheet
from SPREADSHEET_ID.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List

import gspread
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive.file',
]
DEFAULT_SPREADSHEET_TITLE = 'Tweet Analysis Results'
WORKSHEET_TITLE = 'Analysis Results'
HEADER_ROW = ['Username', 'Tweet Content', 'Sentiment', 'Summary', 'Date/Time', 'Tweet URL']
RECORD_FIELDS = ['username', 'tweetContent', 'sentiment', 'summary', 'dateTime', 'tweetUrl']


class SheetsError(Exception):
    """Google Sheets request failed."""


class SheetsConfigError(SheetsError):
    """Credentials or spreadsheet id are missing or malformed."""


def load_credentials_info() -> Dict:
    """Parse the service account JSON from GOOGLE_SHEETS_CREDENTIALS."""
    raw = os.environ.get('GOOGLE_SHEETS_CREDENTIALS', '')
    if not raw.strip():
        raise SheetsConfigError('GOOGLE_SHEETS_CREDENTIALS environment variable not set')

    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SheetsConfigError('GOOGLE_SHEETS_CREDENTIALS contains invalid JSON format') from e

    if not isinstance(info, dict) or not info.get('type') or not info.get('client_email'):
        raise SheetsConfigError('Invalid Google Sheets credentials format - missing required fields')

    return info


def get_spreadsheet_id() -> str:
    spreadsheet_id = os.environ.get('SPREADSHEET_ID')
    if not spreadsheet_id:
        raise SheetsConfigError('SPREADSHEET_ID not configured')
    return spreadsheet_id


def get_sheets_client() -> gspread.Client:
    """Initialize an authorized gspread client from the service account."""
    info = load_credentials_info()
    try:
        creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except ValueError as e:
        raise SheetsConfigError(f'Invalid Google Sheets credentials: {e}') from e
    return gspread.authorize(creds)


def create_spreadsheet(title: str = DEFAULT_SPREADSHEET_TITLE) -> str:
    """
    Create a spreadsheet with the header row.

    Returns:
        The new spreadsheet id
    """
    client = get_sheets_client()
    try:
        spreadsheet = client.create(title)
        worksheet = spreadsheet.sheet1
        worksheet.update_title(WORKSHEET_TITLE)
        worksheet.append_row(HEADER_ROW, value_input_option='RAW')
    except gspread.exceptions.GSpreadException as e:
        logger.error("Creating spreadsheet %r failed: %s", title, e)
        raise SheetsError('Failed to create spreadsheet') from e

    logger.info("Created spreadsheet %s", spreadsheet.id)
    return spreadsheet.id


def _open_worksheet(client: gspread.Client) -> gspread.Worksheet:
    return client.open_by_key(get_spreadsheet_id()).sheet1


def record_to_row(record: Dict, timestamp: str) -> List[str]:
    return [
        record.get('username', ''),
        record.get('tweetContent', ''),
        record.get('sentiment', ''),
        record.get('summary', ''),
        timestamp,
        record.get('tweetUrl', ''),
    ]


def row_to_record(row: List[str]) -> Dict[str, str]:
    padded = list(row) + [''] * (len(RECORD_FIELDS) - len(row))
    return dict(zip(RECORD_FIELDS, padded))


def append_analysis_row(record: Dict) -> Dict:
    """Append one analysis (username, tweetContent, sentiment, summary, tweetUrl)."""
    get_spreadsheet_id()
    client = get_sheets_client()
    timestamp = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')

    try:
        worksheet = _open_worksheet(client)
        worksheet.append_row(record_to_row(record, timestamp), value_input_option='RAW')
    except gspread.exceptions.GSpreadException as e:
        logger.error("Appending analysis row failed: %s", e)
        raise SheetsError('Failed to save to Google Sheets') from e

    return {'success': True, 'dateTime': timestamp}


def list_analysis_rows() -> List[Dict[str, str]]:
    """Read every logged analysis, skipping the header row."""
    get_spreadsheet_id()
    client = get_sheets_client()

    try:
        rows = _open_worksheet(client).get_all_values()
    except gspread.exceptions.GSpreadException as e:
        logger.error("Reading analysis rows failed: %s", e)
        raise SheetsError('Failed to read from Google Sheets') from e

    return [row_to_record(row) for row in rows[1:]]
