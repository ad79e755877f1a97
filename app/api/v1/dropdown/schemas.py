"""Upload-form dropdown schemas (camelCase for frontend)."""

from typing import List, Optional

from pydantic import BaseModel, Field


class SubjectDropdownItem(BaseModel):
    subjectId: int = Field(..., description="Subject id")
    subjectCode: str = Field(..., description="Subject code (e.g. CS301)")
    subjectName: str = Field(..., description="Display name")

    class Config:
        populate_by_name = True


class AcademicYearDropdownItem(BaseModel):
    academicYearId: int = Field(..., description="Academic year id")
    academicYearName: str = Field(..., description="Academic year label (e.g. 2024-2025)")
    startYear: int
    endYear: int

    class Config:
        populate_by_name = True


class UnitDropdownItem(BaseModel):
    """Unit of the offering picked by subject code + academic year."""
    unitId: int
    unitNumber: int
    unitTitle: Optional[str] = None

    class Config:
        populate_by_name = True


class SubjectDropdownEnvelope(BaseModel):
    success: bool = True
    data: List[SubjectDropdownItem]


class AcademicYearDropdownEnvelope(BaseModel):
    success: bool = True
    data: List[AcademicYearDropdownItem]


class UnitDropdownEnvelope(BaseModel):
    success: bool = True
    data: List[UnitDropdownItem]
