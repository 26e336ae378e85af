"""Postgres-backed media job model."""

import uuid

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.sql import func

from database import Base


INGEST_RESEARCH_FILE = "ingest_research_file"
INGEST_META_AD = "ingest_meta_ad"

MEDIA_JOB_PENDING_STATUSES = ("queued", "running")


class MediaJob(Base):
    """Queued background work against a research item or swipe."""

    __tablename__ = "media_jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="queued")
    input = Column(JSON, nullable=False)
    output = Column(JSON, nullable=True)
    attempts = Column(Integer, nullable=False, default=0)
    run_after = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    locked_at = Column(DateTime(timezone=True), nullable=True)
    locked_by = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
