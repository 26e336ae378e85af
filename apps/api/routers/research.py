"""Research item and research file router."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.research import delete_research_item_service
from services.research_files import reap_research_file

router = APIRouter()
items_router = APIRouter()
logger = logging.getLogger(__name__)


@router.delete("/items/{item_id}")
@items_router.delete("/{item_id}")
async def delete_research_item(
    item_id: str,
    auth: AuthContext = Depends(get_auth_context),
    _rate_limit: None = Depends(rate_limit("research_item_delete", limit=300, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a research item and reap its file when no other item shares it."""
    try:
        return await delete_research_item_service(item_id, db)
    except LookupError:
        raise HTTPException(status_code=404, detail="Not found")
    except Exception:
        logger.exception("Delete research item %s failed (user=%s)", item_id, auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to delete research item")


@router.post("/files/{file_id}/reap")
async def reap_research_file_endpoint(
    file_id: str,
    auth: AuthContext = Depends(get_auth_context),
    _rate_limit: None = Depends(rate_limit("research_file_reap", limit=120, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """Re-run the reference check for a file left behind by an interrupted delete."""
    try:
        outcome = await reap_research_file(file_id, db)
    except Exception:
        logger.exception("Reap research file %s failed (user=%s)", file_id, auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to reap research file")
    return {"file_id": file_id, "deleted": bool(outcome.get("deleted"))}
