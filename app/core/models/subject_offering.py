from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class SubjectOffering(Base):
    """A subject taught in a given academic year, owned by a faculty member."""

    __tablename__ = "subject_offerings"
    __table_args__ = (
        UniqueConstraint("subject_id", "academic_year_id", name="uq_offering_subject_year"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False)
    faculty_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    subject = relationship("Subject")
    academic_year = relationship("AcademicYear")
    units = relationship("Unit", back_populates="offering", order_by="Unit.unit_number")
