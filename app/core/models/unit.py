from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base


class Unit(Base):
    """Numbered syllabus unit of a subject offering. unit_number is unique within the offering."""

    __tablename__ = "units"
    __table_args__ = (
        UniqueConstraint("subject_offering_id", "unit_number", name="uq_unit_offering_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_offering_id = Column(
        Integer,
        ForeignKey("subject_offerings.id", ondelete="CASCADE"),
        nullable=False,
    )
    unit_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)

    offering = relationship("SubjectOffering", back_populates="units")
