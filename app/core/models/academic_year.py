from sqlalchemy import Column, Integer, UniqueConstraint

from app.db.session import Base


class AcademicYear(Base):
    """
    Academic year identified by its bounds, e.g. start_year=2024, end_year=2025.
    One row per (start_year, end_year).
    """

    __tablename__ = "academic_years"
    __table_args__ = (
        UniqueConstraint("start_year", "end_year", name="uq_academic_year_bounds"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    start_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=False)

    @property
    def label(self) -> str:
        return f"{self.start_year}-{self.end_year}"
