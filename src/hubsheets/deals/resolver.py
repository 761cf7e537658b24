"""Deal resolution for a single contact.

Reads the contact's associated deal ids and the deal-pipeline catalog, then
fetches every deal concurrently and attaches its PipelineDetail and
StageDetail. A failed fetch cancels the fetches still in flight. A deal
pointing at a pipeline or stage missing from the catalog raises JoinError.
"""

from __future__ import annotations

import asyncio

import structlog

from src.hubsheets.core.exceptions import JoinError
from src.hubsheets.hubspot.schemas import Deal, PipelineDetail
from src.hubsheets.hubspot.source import CRMSource

logger = structlog.get_logger(__name__)


def attach_pipeline(deal: Deal, pipelines: list[PipelineDetail]) -> Deal:
    """Return a copy of ``deal`` with its pipeline and stage attached.

    Raises:
        JoinError: If the pipeline or stage reference cannot be resolved.
    """
    pipeline_id = deal.prop("pipeline")
    pipeline = next((p for p in pipelines if p.pipeline_id == pipeline_id), None)
    if pipeline is None:
        raise JoinError("pipeline", pipeline_id, f"deal {deal.deal_id}")

    stage_id = deal.prop("dealstage")
    stage = next((s for s in pipeline.stages if s.stage_id == stage_id), None)
    if stage is None:
        raise JoinError(
            "stage", stage_id, f"deal {deal.deal_id}, pipeline {pipeline_id}"
        )

    return deal.model_copy(update={"pipeline": pipeline, "stage": stage})


class DealResolver:
    """Resolves the deals of a contact with pipeline/stage metadata attached.

    Args:
        source: CRM read interface (HubSpotClient in production).
    """

    def __init__(self, source: CRMSource) -> None:
        self._source = source

    async def resolve(self, contact_id: int) -> list[Deal]:
        """Return the contact's deals in association order.

        Raises:
            TransportError: If any CRM call fails.
            JoinError: If a deal references an unknown pipeline or stage.
        """
        deal_ids = await self._source.fetch_deal_associations(contact_id)
        if not deal_ids:
            logger.info("deals.none_associated", contact_id=contact_id)
            return []

        pipelines = await self._source.fetch_deal_pipelines()

        # gather() keeps input order regardless of completion order
        tasks = [
            asyncio.create_task(self._source.fetch_deal(deal_id)) for deal_id in deal_ids
        ]
        try:
            raw_deals = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        try:
            deals = [attach_pipeline(deal, pipelines) for deal in raw_deals]
        except JoinError as exc:
            logger.error(
                "deals.join_failed",
                contact_id=contact_id,
                entity=exc.entity,
                reference=exc.reference,
            )
            raise

        logger.info("deals.resolved", contact_id=contact_id, count=len(deals))
        return deals
