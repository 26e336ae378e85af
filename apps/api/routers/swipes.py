"""Swipe detail, media URL and delete router."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.swipes import (
    MediaNotReadyError,
    delete_swipe_service,
    get_swipe_service,
    sign_swipe_media_url_service,
)

router = APIRouter()
logger = logging.getLogger(__name__)


async def _sign_media_url(swipe_id: str, media: str, db: AsyncSession):
    try:
        return await sign_swipe_media_url_service(swipe_id, media, db)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except MediaNotReadyError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except Exception:
        logger.exception("Sign swipe %s url failed for swipe %s", media, swipe_id)
        raise HTTPException(status_code=500, detail=f"Failed to sign {media} url")


@router.get("/{swipe_id}")
async def get_swipe(
    swipe_id: str,
    full: str | None = Query(default=None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await get_swipe_service(swipe_id, db, full=full == "1")
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except Exception:
        logger.exception("Get swipe %s failed", swipe_id)
        raise HTTPException(status_code=500, detail="Failed to fetch swipe")


@router.get("/{swipe_id}/image-url")
async def get_swipe_image_url(
    swipe_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Short-lived signed URL for a ready swipe's image."""
    return await _sign_media_url(swipe_id, "image", db)


@router.get("/{swipe_id}/video-url")
async def get_swipe_video_url(
    swipe_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Short-lived signed URL for a ready swipe's video."""
    return await _sign_media_url(swipe_id, "video", db)


@router.delete("/{swipe_id}")
async def delete_swipe(
    swipe_id: str,
    auth: AuthContext = Depends(get_auth_context),
    _rate_limit: None = Depends(rate_limit("swipe_delete", limit=300, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await delete_swipe_service(swipe_id, db)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except Exception:
        logger.exception("Delete swipe %s failed (user=%s)", swipe_id, auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to delete swipe")
