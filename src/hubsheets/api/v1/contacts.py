"""REST API endpoints for contact lookups: associated deals and free-text search."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.hubsheets.api.deps import get_crm_source
from src.hubsheets.deals.resolver import DealResolver
from src.hubsheets.hubspot.schemas import ContactDetail, Deal
from src.hubsheets.hubspot.source import CRMSource

router = APIRouter(prefix="/contacts", tags=["contacts"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class DealResponse(BaseModel):
    """A deal with its pipeline and stage resolved."""

    deal_id: int
    pipeline_id: str
    pipeline_label: str | None = None
    stage_id: str
    stage_label: str | None = None
    properties: dict[str, str | None] = Field(default_factory=dict)


class ContactResponse(BaseModel):
    """A contact with its property values flattened."""

    vid: int
    properties: dict[str, str | None] = Field(default_factory=dict)


class ContactSearchResponse(BaseModel):
    """One page of contact search results."""

    total: int
    offset: int
    has_more: bool
    contacts: list[ContactResponse] = Field(default_factory=list)


# ── Conversion Helpers ───────────────────────────────────────────────────────


def _deal_to_response(deal: Deal) -> DealResponse:
    """Convert a joined Deal to DealResponse."""
    return DealResponse(
        deal_id=deal.deal_id,
        pipeline_id=deal.pipeline.pipeline_id,
        pipeline_label=deal.pipeline.label,
        stage_id=deal.stage.stage_id,
        stage_label=deal.stage.label,
        properties={name: p.value for name, p in deal.properties.items()},
    )


def _contact_to_response(contact: ContactDetail) -> ContactResponse:
    """Convert ContactDetail to ContactResponse."""
    return ContactResponse(
        vid=contact.vid,
        properties={name: p.value for name, p in contact.properties.items()},
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("/search", response_model=ContactSearchResponse)
async def search_contacts(
    q: str = Query(..., min_length=1),
    count: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    source: CRMSource = Depends(get_crm_source),
) -> ContactSearchResponse:
    """Search contacts by email, name or company."""
    result = await source.search_contacts(q, count=count, offset=offset)
    return ContactSearchResponse(
        total=result.total,
        offset=result.offset,
        has_more=result.has_more,
        contacts=[_contact_to_response(c) for c in result.contacts],
    )


@router.get("/{contact_id}/deals", response_model=list[DealResponse])
async def get_contact_deals(
    contact_id: int,
    source: CRMSource = Depends(get_crm_source),
) -> list[DealResponse]:
    """List a contact's deals with pipeline and stage metadata."""
    deals = await DealResolver(source).resolve(contact_id)
    return [_deal_to_response(deal) for deal in deals]
