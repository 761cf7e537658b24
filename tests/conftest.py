"""Shared test fixtures.

Provides:
- Builders for HubSpot wire-format contact records
- A settings fixture that resets the cached Settings singleton
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from src.hubsheets.config import get_settings
from src.hubsheets.hubspot.schemas import ContactDetail


def make_contact(
    vid: int = 101,
    added_at: int | None = 1_580_515_200_000,
    form_page: str | None = None,
    **props: str | None,
) -> ContactDetail:
    """Build a ContactDetail from HubSpot's batch-answer shape."""
    raw: dict[str, Any] = {
        "vid": vid,
        "properties": {name: {"value": value} for name, value in props.items()},
        "form-submissions": [{"page-url": form_page}] if form_page else [],
    }
    if added_at is not None:
        raw["addedAt"] = added_at
    return ContactDetail.model_validate(raw)


@pytest.fixture
def contact_factory() -> Callable[..., ContactDetail]:
    """Expose make_contact as a fixture."""
    return make_contact


@pytest.fixture
def settings_env(monkeypatch) -> Iterator[pytest.MonkeyPatch]:
    """Yield monkeypatch with the settings cache cleared before and after."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
