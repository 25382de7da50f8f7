#!/usr/bin/env python3
"""
Spreadsheet read access
Public CSV export via requests, or a service account via gspread
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import quote

import requests
import gspread
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError, SpreadsheetNotFound, WorksheetNotFound

from tiketnow.config import AppConfig
from tiketnow.utils.csv_utils import decode_csv

logger = logging.getLogger(__name__)

CSV_EXPORT_URL = 'https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet_name}'
READONLY_SCOPES = ['https://www.googleapis.com/auth/spreadsheets.readonly']


class SheetLoadError(Exception):
    """The spreadsheet could not be read"""

    def __init__(self, message: str = "Could not load data. Verify that the sheet is public."):
        super().__init__(message)


class SheetSource(ABC):
    """Reads a named sheet as rows of string cells, header row included"""

    @abstractmethod
    def fetch_rows(self, sheet_name: str) -> List[List[str]]:
        ...


class CsvExportSheetSource(SheetSource):
    """Reads the public gviz CSV export of a spreadsheet"""

    def __init__(self, sheet_id: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.sheet_id = sheet_id
        self.session = session or requests.Session()
        self.timeout = timeout

    def export_url(self, sheet_name: str) -> str:
        return CSV_EXPORT_URL.format(sheet_id=self.sheet_id, sheet_name=quote(sheet_name, safe=''))

    def fetch_rows(self, sheet_name: str) -> List[List[str]]:
        if not self.sheet_id:
            logger.warning(f"No sheet id configured, returning no rows for '{sheet_name}'")
            return []

        url = self.export_url(sheet_name)
        logger.info(f"Fetching CSV export for sheet '{sheet_name}'")
        try:
            response = self.session.get(
                url,
                headers={'Cache-Control': 'no-cache', 'Pragma': 'no-cache'},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error fetching sheet '{sheet_name}': {e}")
            raise SheetLoadError() from e

        if not response.encoding:
            response.encoding = 'utf-8'
        rows = decode_csv(response.text)
        logger.info(f"Decoded {len(rows)} rows from sheet '{sheet_name}'")
        return rows


class ServiceAccountSheetSource(SheetSource):
    """Reads sheets through the Sheets API with a service account"""

    def __init__(self, sheet_id: str, credentials_file: str, client: Optional[gspread.Client] = None):
        self.sheet_id = sheet_id
        self.credentials_file = credentials_file
        self._gc = client

    def _setup_google_client(self) -> gspread.Client:
        """Initialize Google Sheets client on first use"""
        if self._gc is None:
            try:
                creds = Credentials.from_service_account_file(self.credentials_file, scopes=READONLY_SCOPES)
                self._gc = gspread.Client(auth=creds)
                logger.info("Google Sheets client initialized successfully")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to initialize Google Sheets client: {e}")
                raise SheetLoadError(f"Service account credentials unusable: {e}") from e
        return self._gc

    def fetch_rows(self, sheet_name: str) -> List[List[str]]:
        if not self.sheet_id:
            logger.warning(f"No sheet id configured, returning no rows for '{sheet_name}'")
            return []

        gc = self._setup_google_client()
        try:
            worksheet = gc.open_by_key(self.sheet_id).worksheet(sheet_name)
            rows = worksheet.get_all_values()
        except (SpreadsheetNotFound, WorksheetNotFound) as e:
            logger.error(f"Sheet '{sheet_name}' not found: {e}")
            raise SheetLoadError(f"Sheet '{sheet_name}' not found") from e
        except (APIError, requests.RequestException) as e:
            logger.error(f"Error reading sheet '{sheet_name}': {e}")
            raise SheetLoadError() from e

        logger.info(f"Read {len(rows)} rows from sheet '{sheet_name}'")
        return rows


def build_sheet_source(config: AppConfig) -> SheetSource:
    """Service account when a credentials file is configured, public CSV otherwise"""
    if config.google_service_account_file:
        return ServiceAccountSheetSource(config.sheet_id, config.google_service_account_file)
    return CsvExportSheetSource(config.sheet_id, timeout=config.request_timeout)
