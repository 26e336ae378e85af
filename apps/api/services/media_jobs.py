"""Media job helpers used by delete paths."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from models.media_job import INGEST_RESEARCH_FILE, MEDIA_JOB_PENDING_STATUSES, MediaJob

logger = logging.getLogger(__name__)


async def cancel_pending_research_jobs(research_item_id: str, db: AsyncSession) -> int:
    """Remove queued/running ingest jobs for a research item.

    Jobs in terminal states are history and stay untouched. The caller owns
    the commit so the removal lands no later than the item row deletion.
    """
    result = await db.execute(
        delete(MediaJob)
        .where(
            MediaJob.type == INGEST_RESEARCH_FILE,
            MediaJob.input["research_item_id"].as_string() == research_item_id,
            MediaJob.status.in_(MEDIA_JOB_PENDING_STATUSES),
        )
        .execution_options(synchronize_session=False)
    )
    removed = int(result.rowcount or 0)
    if removed:
        logger.info("Cancelled %s pending ingest job(s) for research item %s", removed, research_item_id)
    return removed
