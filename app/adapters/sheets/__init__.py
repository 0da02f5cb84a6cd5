"""Origin adapters for tabular spreadsheet data."""

from app.adapters.sheets.base import AbstractSheetsClient
from app.adapters.sheets.google_sheets import GoogleSheetsClient

__all__ = [
    "AbstractSheetsClient",
    "GoogleSheetsClient",
]
