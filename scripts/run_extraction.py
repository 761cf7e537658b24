#!/usr/bin/env python3
"""CLI script to run one incremental HubSpot -> Google Sheets extraction.

Usage:
    uv run python scripts/run_extraction.py --time-stop 1580515200000
    uv run python scripts/run_extraction.py --vid-stop 12345 --sheet-id 1XTVt04G... --range "Página1"

Reads HUBSPOT_API_KEY, GOOGLE_SERVICE_ACCOUNT_FILE (or _JSON_B64) and
GOOGLE_SHEET_ID from the environment or the project .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.hubsheets
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def extract(
    vid_offset: int | None,
    time_offset: int | None,
    vid_stop: int | None,
    time_stop: int | None,
    sheet_id: str | None,
    range_label: str | None,
) -> int:
    """Run the extraction and return the number of contacts appended."""
    from src.hubsheets.attribution.resolver import AttributionResolver
    from src.hubsheets.config import get_settings
    from src.hubsheets.core.logging import configure_structlog
    from src.hubsheets.hubspot.client import HubSpotClient
    from src.hubsheets.hubspot.schemas import PageCursor, StopCondition
    from src.hubsheets.pipeline.engine import PaginationEngine
    from src.hubsheets.services.google import GoogleAuthManager, SheetsService
    from src.hubsheets.sheets.sink import SheetSink

    configure_structlog()
    settings = get_settings()

    service_account_path = settings.get_service_account_path()
    if not settings.HUBSPOT_API_KEY or not service_account_path:
        print("HUBSPOT_API_KEY and a Google service account are required", file=sys.stderr)
        return -1

    spreadsheet_id = sheet_id or settings.GOOGLE_SHEET_ID
    if not spreadsheet_id:
        print("No spreadsheet id: pass --sheet-id or set GOOGLE_SHEET_ID", file=sys.stderr)
        return -1

    engine = PaginationEngine(
        source=HubSpotClient(
            api_key=settings.HUBSPOT_API_KEY,
            base_url=settings.HUBSPOT_BASE_URL,
            timeout=settings.HUBSPOT_TIMEOUT,
        ),
        resolver=AttributionResolver(portal_id=settings.HUBSPOT_PORTAL_ID),
        sink=SheetSink(
            SheetsService(GoogleAuthManager(service_account_path)),
            spreadsheet_id=spreadsheet_id,
            range_label=range_label or settings.GOOGLE_SHEET_RANGE,
        ),
    )
    contacts = await engine.run(
        cursor=PageCursor(vid_offset=vid_offset, time_offset=time_offset),
        stop=StopCondition(vid_stop=vid_stop, time_stop=time_stop),
    )
    return len(contacts)


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract recent HubSpot contacts into Google Sheets")
    parser.add_argument("--vid-offset", type=int, default=None, help="Start after this vid offset")
    parser.add_argument("--time-offset", type=int, default=None, help="Start at this time offset (epoch ms)")
    parser.add_argument("--vid-stop", type=int, default=None, help="Stop before this contact vid")
    parser.add_argument("--time-stop", type=int, default=None, help="Stop at contacts added at/before this epoch ms")
    parser.add_argument("--sheet-id", default=None, help="Target spreadsheet id (default: GOOGLE_SHEET_ID)")
    parser.add_argument("--range", dest="range_label", default=None, help="Sheet name or A1 range")
    args = parser.parse_args()

    from src.hubsheets.core.exceptions import PipelineError

    try:
        count = asyncio.run(
            extract(
                args.vid_offset,
                args.time_offset,
                args.vid_stop,
                args.time_stop,
                args.sheet_id,
                args.range_label,
            )
        )
    except PipelineError as exc:
        print(f"Extraction failed: {exc}", file=sys.stderr)
        sys.exit(1)

    if count < 0:
        sys.exit(2)
    print(f"Extraction finished: {count} contacts appended")


if __name__ == "__main__":
    main()
