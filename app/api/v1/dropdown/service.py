"""Reference data for the upload form: subjects, academic years and units of an offering."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.resources.resolver import resolve_scope
from app.core.models import AcademicYear, Subject, Unit

from .schemas import AcademicYearDropdownItem, SubjectDropdownItem, UnitDropdownItem


async def list_subjects(db: AsyncSession) -> List[SubjectDropdownItem]:
    result = await db.execute(select(Subject).order_by(Subject.code))
    return [
        SubjectDropdownItem(subjectId=s.id, subjectCode=s.code, subjectName=s.name)
        for s in result.scalars().all()
    ]


async def list_academic_years(db: AsyncSession) -> List[AcademicYearDropdownItem]:
    """Most recent first."""
    result = await db.execute(
        select(AcademicYear).order_by(AcademicYear.start_year.desc(), AcademicYear.end_year.desc())
    )
    return [
        AcademicYearDropdownItem(
            academicYearId=ay.id,
            academicYearName=ay.label,
            startYear=ay.start_year,
            endYear=ay.end_year,
        )
        for ay in result.scalars().all()
    ]


async def list_units(
    db: AsyncSession,
    subject_code: str,
    start_year: int,
    end_year: int,
) -> List[UnitDropdownItem]:
    """Units of the offering for (subject, year). Raises NotFoundError if the offering does not resolve."""
    scope = await resolve_scope(db, subject_code, start_year, end_year)
    result = await db.execute(
        select(Unit)
        .where(Unit.subject_offering_id == scope.offering.id)
        .order_by(Unit.unit_number)
    )
    return [
        UnitDropdownItem(unitId=u.id, unitNumber=u.unit_number, unitTitle=u.title)
        for u in result.scalars().all()
    ]
