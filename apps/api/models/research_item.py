"""ResearchItem model for curated research content."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class ResearchItem(Base):
    """Research content, optionally backed by an uploaded file."""

    __tablename__ = "research_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(String, nullable=False, index=True)
    category_id = Column(String, nullable=True, index=True)
    type = Column(String, nullable=False)  # text, file
    title = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    source_url = Column(String, nullable=True)
    file_id = Column(
        String,
        ForeignKey("research_files.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(String, nullable=False, default="inbox")
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    file = relationship("ResearchFile", back_populates="items")
