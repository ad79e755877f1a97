from app.core.models.academic_year import AcademicYear
from app.core.models.resource import Resource
from app.core.models.subject import Subject
from app.core.models.subject_offering import SubjectOffering
from app.core.models.unit import Unit

__all__ = [
    "AcademicYear",
    "Resource",
    "Subject",
    "SubjectOffering",
    "Unit",
]
