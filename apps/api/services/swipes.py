"""Swipe read/delete services backed by the R2 blob store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.media_job import MediaJob
from models.swipe import Swipe
from services.blob_store import get_blob_store

logger = logging.getLogger(__name__)

TRANSCRIPT_PREVIEW_CHARS = 4000
SWIPE_MEDIA_KEY_COLUMNS = {
    "image": Swipe.r2_image_key,
    "video": Swipe.r2_video_key,
}


class MediaNotReadyError(Exception):
    """Swipe exists but its media cannot be served yet."""

    def __init__(self, media: str):
        super().__init__(f"{media.capitalize()} not ready")
        self.media = media


def _isoformat(value: Any) -> Optional[str]:
    return value.isoformat() if value else None


def _serialize_swipe(swipe: Swipe) -> Dict[str, Any]:
    return {
        "id": swipe.id,
        "product_id": swipe.product_id,
        "source": swipe.source,
        "source_url": swipe.source_url,
        "source_id": swipe.source_id,
        "status": swipe.status,
        "title": swipe.title,
        "summary": swipe.summary,
        "transcript": swipe.transcript,
        "headline": swipe.headline,
        "ad_copy": swipe.ad_copy,
        "cta": swipe.cta,
        "media_type": swipe.media_type,
        "r2_video_key": swipe.r2_video_key,
        "r2_video_mime": swipe.r2_video_mime,
        "r2_image_key": swipe.r2_image_key,
        "duration_seconds": swipe.duration_seconds,
        "error_message": swipe.error_message,
        "metadata": swipe.metadata_json or {},
        "created_by": swipe.created_by,
        "created_at": _isoformat(swipe.created_at),
        "updated_at": _isoformat(swipe.updated_at),
    }


async def get_swipe_service(swipe_id: str, db: AsyncSession, full: bool = False) -> Dict[str, Any]:
    """Return a swipe with its latest media job, truncating long transcripts."""
    result = await db.execute(select(Swipe).where(Swipe.id == swipe_id).limit(1))
    swipe = result.scalar_one_or_none()
    if swipe is None:
        raise LookupError(f"Swipe {swipe_id} not found")

    job_result = await db.execute(
        select(MediaJob)
        .where(MediaJob.input["swipe_id"].as_string() == swipe_id)
        .order_by(MediaJob.created_at.desc())
        .limit(1)
    )
    job = job_result.scalar_one_or_none()

    payload = _serialize_swipe(swipe)
    payload.update(
        {
            "job_id": job.id if job else None,
            "job_status": job.status if job else None,
            "job_error_message": job.error_message if job else None,
            "job_updated_at": _isoformat(job.updated_at) if job else None,
            "job_attempts": job.attempts if job else None,
        }
    )

    transcript = payload.get("transcript")
    if not full and isinstance(transcript, str) and len(transcript) > TRANSCRIPT_PREVIEW_CHARS:
        payload["transcript"] = transcript[:TRANSCRIPT_PREVIEW_CHARS] + "\n\n...(truncated)"
        payload["transcript_truncated"] = True
    return payload


async def sign_swipe_media_url_service(swipe_id: str, media: str, db: AsyncSession) -> Dict[str, str]:
    """Issue a short-lived read URL for a ready swipe's image or video."""
    key_column = SWIPE_MEDIA_KEY_COLUMNS[media]
    result = await db.execute(
        select(Swipe.id, Swipe.status, key_column.label("r2_key")).where(Swipe.id == swipe_id).limit(1)
    )
    row = result.first()
    if row is None:
        raise LookupError(f"Swipe {swipe_id} not found")
    if row.status != "ready" or not row.r2_key:
        raise MediaNotReadyError(media)

    blob_store = get_blob_store()
    url = await asyncio.to_thread(
        blob_store.sign_read_url,
        row.r2_key,
        settings.SWIPE_MEDIA_URL_TTL_SECONDS,
    )
    return {"url": url}


async def delete_swipe_service(swipe_id: str, db: AsyncSession) -> Dict[str, Any]:
    """Delete a swipe row, then best-effort delete its video and image blobs."""
    result = await db.execute(
        select(Swipe.id, Swipe.r2_video_key, Swipe.r2_image_key).where(Swipe.id == swipe_id).limit(1)
    )
    swipe = result.first()
    if swipe is None:
        raise LookupError(f"Swipe {swipe_id} not found")

    keys = [key for key in (swipe.r2_video_key, swipe.r2_image_key) if key]
    blob_store = get_blob_store() if keys else None

    await db.execute(
        delete(Swipe).where(Swipe.id == swipe_id).execution_options(synchronize_session=False)
    )
    await db.commit()

    for key in keys:
        try:
            await asyncio.to_thread(blob_store.delete_object, key)
        except Exception as exc:
            logger.warning("Orphaned blob: failed to delete swipe %s blob key=%s: %s", swipe_id, key, exc)

    return {"success": True}
