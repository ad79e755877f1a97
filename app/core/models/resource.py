"""Shared academic resources: uploaded files or external links."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Resource(Base):
    """
    kind=file: storage_path set, external_url null.
    kind=external_link: external_url set, storage_path null.
    Rows are never removed; DELETE sets is_deleted and every listing skips them.
    """

    __tablename__ = "resources"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    kind = Column(String(20), nullable=False)  # file | external_link
    resource_type = Column(String(50), nullable=True)  # question_paper | lecture_notes | ...
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False)
    subject_offering_id = Column(Integer, ForeignKey("subject_offerings.id", ondelete="RESTRICT"), nullable=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=True)
    storage_path = Column(Text, nullable=True)
    external_url = Column(Text, nullable=True)
    contributor_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    subject = relationship("Subject")
    offering = relationship("SubjectOffering")
    unit = relationship("Unit")
    contributor = relationship("User", foreign_keys=[contributor_id])
