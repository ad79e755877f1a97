"""
Resolve the human-readable scope of a resource to internal ids:
subject code -> academic year (start, end) -> subject offering -> unit (optional).

Each step needs the previous step's id, so the order is fixed. The first miss raises
NotFoundError and nothing after it is looked up. Misses are bad input, never retried.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.models import AcademicYear, Subject, SubjectOffering, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedScope:
    subject: Subject
    academic_year_id: int
    offering: SubjectOffering
    unit_id: Optional[int] = None


async def resolve_subject(db: AsyncSession, subject_code: str) -> Subject:
    result = await db.execute(select(Subject).where(Subject.code == subject_code))
    subject = result.scalar_one_or_none()
    if subject is None:
        raise NotFoundError("subject", f"Subject with code '{subject_code}' not found")
    return subject


async def resolve_academic_year(db: AsyncSession, start_year: int, end_year: int) -> int:
    result = await db.execute(
        select(AcademicYear.id).where(
            AcademicYear.start_year == start_year,
            AcademicYear.end_year == end_year,
        )
    )
    academic_year_id = result.scalar_one_or_none()
    if academic_year_id is None:
        raise NotFoundError("academic_year", f"Academic year {start_year}-{end_year} not found")
    return academic_year_id


async def resolve_subject_offering(db: AsyncSession, subject_id: int, academic_year_id: int) -> SubjectOffering:
    result = await db.execute(
        select(SubjectOffering).where(
            SubjectOffering.subject_id == subject_id,
            SubjectOffering.academic_year_id == academic_year_id,
        )
    )
    offering = result.scalar_one_or_none()
    if offering is None:
        raise NotFoundError("offering", "Subject offering not found for the given subject and academic year")
    return offering


async def resolve_unit(db: AsyncSession, subject_offering_id: int, unit_number: int) -> int:
    result = await db.execute(
        select(Unit.id).where(
            Unit.subject_offering_id == subject_offering_id,
            Unit.unit_number == unit_number,
        )
    )
    unit_id = result.scalar_one_or_none()
    if unit_id is None:
        raise NotFoundError("unit", f"Unit {unit_number} not found for this subject offering")
    return unit_id


async def resolve_scope(
    db: AsyncSession,
    subject_code: str,
    start_year: int,
    end_year: int,
    unit_number: Optional[int] = None,
) -> ResolvedScope:
    """Run the whole chain. The unit step only runs for a non-zero unit_number."""
    try:
        subject = await resolve_subject(db, subject_code)
        academic_year_id = await resolve_academic_year(db, start_year, end_year)
        offering = await resolve_subject_offering(db, subject.id, academic_year_id)
        unit_id = await resolve_unit(db, offering.id, unit_number) if unit_number else None
    except NotFoundError as e:
        logger.info("Scope resolution stopped at %s: %s", e.entity, e.message)
        raise
    return ResolvedScope(
        subject=subject,
        academic_year_id=academic_year_id,
        offering=offering,
        unit_id=unit_id,
    )
