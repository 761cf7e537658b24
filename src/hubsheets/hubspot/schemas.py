"""Pydantic schemas for HubSpot contacts, deals and pipelines plus the output row.

HubSpot's v1 endpoints use hyphenated and camelCase keys ("form-submissions",
"has-more", "addedAt", "pipelineId"). Each model maps them through field
aliases and accepts either the alias or the field name on input.

Defines:
- Wire records: PropertyValue, FormSubmission, ContactSummary, ContactDetail,
  RecentContactsPage, ContactSearchResult, AssociationPage, StageDetail,
  PipelineDetail, PipelineCatalog, Deal
- Loop control: PageCursor, StopCondition
- Output: FormattedContact
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Contacts ────────────────────────────────────────────────────────────────


class PropertyValue(BaseModel):
    """A single HubSpot property. Only the current value is kept."""

    model_config = ConfigDict(frozen=True)

    value: str | None = None


class FormSubmission(BaseModel):
    """One entry of a contact's "form-submissions" list."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    page_url: str | None = Field(default=None, alias="page-url")
    form_id: str | None = Field(default=None, alias="form-id")
    timestamp: int | None = None


class ContactSummary(BaseModel):
    """Minimal contact from the recent-contacts listing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    vid: int
    added_at: int = Field(alias="addedAt")  # epoch milliseconds


class ContactDetail(BaseModel):
    """Full contact record from the batch-by-vid endpoint.

    ``added_at`` is not part of the batch answer; the pagination engine joins it
    in from the ContactSummary that triggered the fetch.
    """

    model_config = ConfigDict(populate_by_name=True)

    vid: int
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    form_submissions: list[FormSubmission] = Field(
        default_factory=list, alias="form-submissions"
    )
    added_at: int | None = Field(default=None, alias="addedAt")

    def prop(self, name: str) -> str | None:
        """Return the value of a property, or None when it is absent."""
        prop = self.properties.get(name)
        return prop.value if prop is not None else None


class RecentContactsPage(BaseModel):
    """One page of /contacts/v1/lists/all/contacts/recent."""

    model_config = ConfigDict(populate_by_name=True)

    contacts: list[ContactSummary] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="has-more")
    vid_offset: int | None = Field(default=None, alias="vid-offset")
    time_offset: int | None = Field(default=None, alias="time-offset")


class ContactSearchResult(BaseModel):
    """Result of /contacts/v1/search/query."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = None
    contacts: list[ContactDetail] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="has-more")
    offset: int = 0
    total: int = 0


# ── Deals & Pipelines ───────────────────────────────────────────────────────


class AssociationPage(BaseModel):
    """One page of /crm-associations/v1/associations."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    results: list[int] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")
    offset: int | None = None


class StageDetail(BaseModel):
    """A stage inside a deal pipeline."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    stage_id: str = Field(alias="stageId")
    label: str | None = None
    probability: float | None = None
    display_order: int | None = Field(default=None, alias="displayOrder")


class PipelineDetail(BaseModel):
    """A deal pipeline from the pipeline catalog."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    pipeline_id: str = Field(alias="pipelineId")
    label: str | None = None
    stages: list[StageDetail] = Field(default_factory=list)


class PipelineCatalog(BaseModel):
    """Answer of /crm-pipelines/v1/pipelines/deals."""

    model_config = ConfigDict(extra="allow")

    results: list[PipelineDetail] = Field(default_factory=list)


class Deal(BaseModel):
    """A HubSpot deal. ``pipeline`` and ``stage`` are attached by DealResolver."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    deal_id: int = Field(alias="dealId")
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    pipeline: PipelineDetail | None = None
    stage: StageDetail | None = None

    def prop(self, name: str) -> str | None:
        """Return the value of a property, or None when it is absent."""
        prop = self.properties.get(name)
        return prop.value if prop is not None else None


# ── Loop Control ────────────────────────────────────────────────────────────


class PageCursor(BaseModel):
    """Opaque pagination token pair; None means start of listing."""

    model_config = ConfigDict(frozen=True)

    vid_offset: int | None = None
    time_offset: int | None = None


class StopCondition(BaseModel):
    """Where an incremental extraction stops.

    ``vid_stop`` halts before the contact with that vid; ``time_stop`` halts
    before the first contact added at or before that epoch-ms timestamp.
    """

    model_config = ConfigDict(frozen=True)

    vid_stop: int | None = None
    time_stop: int | None = None


# ── Output ──────────────────────────────────────────────────────────────────


class FormattedContact(BaseModel):
    """Flat report row for one contact.

    Only explicitly set fields are emitted by ``to_row()``: a contact without
    attribution data yields just id, hs_url and addedAt, and ``ad`` only
    appears for LinkedIn leads with a conversion event.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    hs_url: str
    added_at: str = Field(alias="addedAt")
    institution: str | None = None
    utm_source: str | None = None
    utm_campaign: str | None = None
    hsa_grp: str | None = None
    utm_content: str | None = None
    ad: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Serialize with wire names, dropping fields that were never set."""
        return self.model_dump(by_alias=True, exclude_unset=True)
