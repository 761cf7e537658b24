"""Google API services -- service account auth and async Sheets appends."""

from src.hubsheets.services.google.auth import GoogleAuthManager
from src.hubsheets.services.google.sheets import SheetsService

__all__ = [
    "GoogleAuthManager",
    "SheetsService",
]
