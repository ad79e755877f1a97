"""Upload-form dropdown API: subjects, academic years, units."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.db.session import get_db

from .schemas import AcademicYearDropdownEnvelope, SubjectDropdownEnvelope, UnitDropdownEnvelope
from . import service

router = APIRouter(prefix="/dropdown", tags=["dropdown"])


@router.get("/subjects", response_model=SubjectDropdownEnvelope)
async def subject_dropdown(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SubjectDropdownEnvelope(data=await service.list_subjects(db))


@router.get("/academic-years", response_model=AcademicYearDropdownEnvelope)
async def academic_year_dropdown(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return AcademicYearDropdownEnvelope(data=await service.list_academic_years(db))


@router.get("/units", response_model=UnitDropdownEnvelope)
async def unit_dropdown(
    subject_code: str = Query(..., min_length=1),
    start_year: int = Query(...),
    end_year: int = Query(...),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Units for the offering of `subject_code` in `start_year`-`end_year`.
    404 when the subject, year or offering does not exist.
    """
    return UnitDropdownEnvelope(data=await service.list_units(db, subject_code, start_year, end_year))
