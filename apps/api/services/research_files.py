"""Reference-counted reaping of shared research files and their blobs."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from database import async_session_maker
from models.research_file import ResearchFile
from models.research_item import ResearchItem
from services.blob_store import BlobStore, BlobStoreConfigurationError, get_blob_store

logger = logging.getLogger(__name__)


async def count_file_references(file_id: str, db: AsyncSession) -> int:
    """Number of research items whose file_id points at ``file_id``."""
    result = await db.execute(
        select(func.count(ResearchItem.id)).where(ResearchItem.file_id == file_id)
    )
    return int(result.scalar_one() or 0)


async def _delete_blob_best_effort(blob_store: BlobStore, key: str, file_id: str) -> bool:
    try:
        await asyncio.to_thread(blob_store.delete_object, key)
        return True
    except Exception as exc:
        logger.warning(
            "Orphaned blob: failed to delete research file %s blob key=%s: %s",
            file_id,
            key,
            exc,
        )
        return False


async def reap_research_file(file_id: str, db: AsyncSession) -> Dict[str, Any]:
    """Delete a research file row and its blob once nothing references it.

    Called after a referencing item row has been removed. The file row is
    deleted and committed before the blob so readers never see a row whose
    blob has vanished. Blob deletion failures are logged and swallowed.
    """
    references = await count_file_references(file_id, db)
    if references > 0:
        return {"file_id": file_id, "deleted": False, "references": references}

    result = await db.execute(
        select(ResearchFile.id, ResearchFile.r2_key).where(ResearchFile.id == file_id).limit(1)
    )
    row = result.first()
    if row is None:
        return {"file_id": file_id, "deleted": False, "references": 0}

    r2_key = row.r2_key
    # Resolve the client before touching the row so a misconfigured store
    # fails while the file is still recoverable.
    blob_store = get_blob_store() if r2_key else None

    deleted = await db.execute(
        delete(ResearchFile)
        .where(ResearchFile.id == file_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if not deleted.rowcount:
        # A concurrent reap removed the row first and owns the blob cleanup.
        return {"file_id": file_id, "deleted": False, "references": 0}

    blob_deleted = False
    if blob_store is not None:
        blob_deleted = await _delete_blob_best_effort(blob_store, r2_key, file_id)

    logger.info("Reaped research file %s (blob_deleted=%s)", file_id, blob_deleted)
    return {"file_id": file_id, "deleted": True, "references": 0, "blob_deleted": blob_deleted}


async def sweep_unreferenced_research_files(
    db: AsyncSession,
    older_than_minutes: Optional[int] = None,
    limit: Optional[int] = None,
) -> Dict[str, int]:
    """Reap files left with zero references by interrupted deletes.

    Files younger than the grace period are skipped because ingestion
    creates the file row before the item that points at it.
    """
    grace = settings.RESEARCH_FILE_SWEEP_GRACE_MINUTES if older_than_minutes is None else older_than_minutes
    batch = settings.RESEARCH_FILE_SWEEP_BATCH_SIZE if limit is None else limit
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max(int(grace), 0))

    referenced = select(ResearchItem.id).where(ResearchItem.file_id == ResearchFile.id).exists()
    result = await db.execute(
        select(ResearchFile.id)
        .where(~referenced, ResearchFile.created_at < cutoff)
        .order_by(ResearchFile.created_at.asc())
        .limit(max(int(batch), 1))
    )
    file_ids = [str(file_id) for file_id in result.scalars().all()]

    reaped = 0
    failed = 0
    for file_id in file_ids:
        try:
            outcome = await reap_research_file(file_id, db)
        except BlobStoreConfigurationError:
            raise
        except Exception:
            await db.rollback()
            failed += 1
            logger.exception("Research file sweep failed for file %s", file_id)
            continue
        if outcome.get("deleted"):
            reaped += 1

    return {"scanned": len(file_ids), "reaped": reaped, "failed": failed}


async def run_research_file_sweep_service() -> Dict[str, int]:
    """Periodic entrypoint with its own session."""
    async with async_session_maker() as db:
        return await sweep_unreferenced_research_files(db)
