"""Swipe model for captured ad examples."""

import uuid

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.sql import func

from database import Base


class Swipe(Base):
    """Captured ad with media in R2 and an extracted transcript."""

    __tablename__ = "swipes"
    __table_args__ = (
        Index("ix_swipes_unique_source", "product_id", "source", "source_url", unique=True),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(String, nullable=False, index=True)
    source = Column(String, nullable=False, default="meta_ad_library")
    source_url = Column(String, nullable=False)
    source_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="processing", index=True)  # processing, ready, failed
    title = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)
    headline = Column(Text, nullable=True)
    ad_copy = Column(Text, nullable=True)
    cta = Column(Text, nullable=True)
    media_type = Column(String, nullable=True, default="video")
    r2_video_key = Column(String, nullable=True)
    r2_video_mime = Column(String, nullable=False, default="video/mp4")
    r2_image_key = Column(String, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
