"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.hubsheets.api.v1 import contacts, extractions, health

router = APIRouter()

router.include_router(health.router)
router.include_router(contacts.router)
router.include_router(extractions.router)
