"""REST API endpoint that runs one incremental contact extraction into a sheet."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.hubsheets.api.deps import (
    get_attribution_resolver,
    get_crm_source,
    get_sheets_service,
)
from src.hubsheets.attribution.resolver import AttributionResolver
from src.hubsheets.config import get_settings
from src.hubsheets.hubspot.schemas import PageCursor, StopCondition
from src.hubsheets.hubspot.source import CRMSource
from src.hubsheets.pipeline.engine import PaginationEngine
from src.hubsheets.services.google.sheets import SheetsService
from src.hubsheets.sheets.sink import SheetSink

router = APIRouter(prefix="/extractions", tags=["extractions"])


class ExtractionRequest(BaseModel):
    """Request body for an extraction run. Every field is optional."""

    vid_offset: int | None = None
    time_offset: int | None = None
    vid_stop: int | None = None
    time_stop: int | None = None
    spreadsheet_id: str | None = None
    range: str | None = None


class ExtractionResponse(BaseModel):
    """Summary of a finished extraction run."""

    contact_count: int
    vids: list[int] = Field(default_factory=list)


@router.post("", response_model=ExtractionResponse)
async def run_extraction(
    body: ExtractionRequest,
    source: CRMSource = Depends(get_crm_source),
    sheets: SheetsService = Depends(get_sheets_service),
    resolver: AttributionResolver = Depends(get_attribution_resolver),
) -> ExtractionResponse:
    """Extract recent contacts down to the stop point and append them to the sheet."""
    settings = get_settings()
    spreadsheet_id = body.spreadsheet_id or settings.GOOGLE_SHEET_ID
    if not spreadsheet_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="spreadsheet_id is required when GOOGLE_SHEET_ID is not set",
        )

    sink = SheetSink(
        sheets,
        spreadsheet_id=spreadsheet_id,
        range_label=body.range or settings.GOOGLE_SHEET_RANGE,
    )
    engine = PaginationEngine(source=source, resolver=resolver, sink=sink)
    contacts = await engine.run(
        cursor=PageCursor(vid_offset=body.vid_offset, time_offset=body.time_offset),
        stop=StopCondition(vid_stop=body.vid_stop, time_stop=body.time_stop),
    )
    return ExtractionResponse(
        contact_count=len(contacts),
        vids=[contact.vid for contact in contacts],
    )
