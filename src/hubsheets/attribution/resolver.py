"""Marketing-attribution derivation for HubSpot contacts.

Turns a ContactDetail into the flat FormattedContact report row:

1. id, hs_url and addedAt are always set.
2. UTM-style parameters are read from the query strings of up to five
   candidate URLs, in this precedence (later wins on key collision):
   first-touch URL, last-touch URL, first referrer, last referrer,
   first form-submission page URL.
3. The institution comes from the hostname of the last-touch URL only.
4. Source overrides: Facebook traffic referred by instagram.com is reported
   as Instagram; LinkedIn leads get their first conversion event as ``ad``.

Contacts without any candidate URL and without a conversion event yield the
minimal row from step 1.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

import structlog

from src.hubsheets.attribution.urls import hostname_of, parse_url_params
from src.hubsheets.core.exceptions import JoinError
from src.hubsheets.hubspot.schemas import ContactDetail, FormattedContact

logger = structlog.get_logger(__name__)

INSTITUTIONS: Mapping[str, str] = MappingProxyType({
    "br.digitalmarketinginstitute.com": "DMI",
    "dmi.espm.br": "ESPM",
    "gestaopublica.fecap.br": "Fecap",
    "posead.institutosingularidades.edu.br": "Singularidades",
    "cursopos.com": "FAT",
})

# Candidate URL properties, lowest precedence first
URL_PROPERTIES: tuple[str, ...] = (
    "hs_analytics_first_url",
    "hs_analytics_last_url",
    "hs_analytics_first_referrer",
    "hs_analytics_last_referrer",
)

ADDED_AT_FORMAT = "%d/%m/%Y - %H:%M"
HS_URL_TEMPLATE = "https://app.hubspot.com/contacts/{portal_id}/contact/{vid}"
INSTAGRAM_REFERRER = "http://instagram.com/"


def format_added_at(added_at: int) -> str:
    """Format an epoch-millisecond timestamp as DD/MM/YYYY - HH:mm in local time."""
    return datetime.fromtimestamp(added_at / 1000).strftime(ADDED_AT_FORMAT)


def candidate_urls(contact: ContactDetail) -> list[str]:
    """Return the present candidate URLs in precedence order."""
    urls = [contact.prop(name) for name in URL_PROPERTIES]
    urls.append(
        contact.form_submissions[0].page_url if contact.form_submissions else None
    )
    return [url for url in urls if url is not None]


class AttributionResolver:
    """Formats contacts into report rows.

    Args:
        portal_id: HubSpot portal (hub) id used in the contact record URL.
    """

    def __init__(self, portal_id: str) -> None:
        self._portal_id = portal_id

    def format(self, contact: ContactDetail) -> FormattedContact:
        """Derive the report row for one enriched contact.

        Raises:
            JoinError: If the contact was never joined with its listing
                summary and therefore has no addedAt.
        """
        if contact.added_at is None:
            raise JoinError("summary", contact.vid, "contact detail has no addedAt")

        fields: dict[str, Any] = {
            "id": contact.vid,
            "hs_url": HS_URL_TEMPLATE.format(portal_id=self._portal_id, vid=contact.vid),
            "added_at": format_added_at(contact.added_at),
        }

        urls = candidate_urls(contact)
        conversion_event = contact.prop("first_conversion_event_name")
        if not urls and conversion_event is None:
            return FormattedContact(**fields)

        params: dict[str, str] = {}
        for url in urls:
            params.update(parse_url_params(url))

        source = params.get("utm_source")
        if (
            source == "facebook"
            and contact.prop("hs_analytics_first_referrer") == INSTAGRAM_REFERRER
        ):
            source = "instagram"

        fields.update(
            institution=INSTITUTIONS.get(hostname_of(contact.prop("hs_analytics_last_url"))),
            utm_source=source,
            utm_campaign=params.get("utm_campaign"),
            hsa_grp=params.get("hsa_grp") or params.get("ad_group"),
            utm_content=params.get("utm_content"),
        )

        if source == "linkedin" and conversion_event is not None:
            fields["ad"] = conversion_event

        return FormattedContact(**fields)

    def format_many(self, contacts: Iterable[ContactDetail]) -> list[FormattedContact]:
        """Format a batch of contacts, preserving order."""
        rows = [self.format(contact) for contact in contacts]
        logger.debug("attribution.formatted", count=len(rows))
        return rows
