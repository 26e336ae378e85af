"""Research item lifecycle services."""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.research_item import ResearchItem
from services.media_jobs import cancel_pending_research_jobs
from services.research_files import reap_research_file

logger = logging.getLogger(__name__)


async def delete_research_item_service(item_id: str, db: AsyncSession) -> Dict[str, Any]:
    """Delete a research item, its pending ingest jobs and, if unshared, its file.

    Raises LookupError when the item does not exist; nothing else is touched
    in that case. Steps are ordered so a failure after the item row is gone
    leaves a file with zero references, which a later reap can finish.
    """
    result = await db.execute(
        select(ResearchItem.id, ResearchItem.file_id).where(ResearchItem.id == item_id).limit(1)
    )
    item = result.first()
    if item is None:
        raise LookupError(f"Research item {item_id} not found")

    cancelled = await cancel_pending_research_jobs(item_id, db)
    await db.execute(
        delete(ResearchItem)
        .where(ResearchItem.id == item_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info("Deleted research item %s (cancelled_jobs=%s)", item_id, cancelled)

    file_id = item.file_id
    if file_id:
        await reap_research_file(str(file_id), db)

    return {"success": True}
