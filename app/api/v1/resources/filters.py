"""
Browse-view facets and filtering over an already fetched resource list.

Works on any objects exposing course_name, unit_id, unit_number, unit_title,
academic_year and resource_type (ResourceListItem in practice). No I/O.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from app.core.enums import ResourceType

ALL = "all"

RESOURCE_TYPE_LABELS: Dict[str, str] = {
    ResourceType.QUESTION_PAPER.value: "Question Paper",
    ResourceType.LECTURE_NOTES.value: "Lecture Notes",
    ResourceType.RESEARCH_PAPER.value: "Research Paper",
    ResourceType.PROJECT_MATERIAL.value: "Project Material",
    ResourceType.NOTES.value: "Notes",
}


@dataclass(frozen=True)
class UnitOption:
    unit_id: int
    unit_number: int
    unit_title: str


def resource_type_label(resource_type: Optional[str]) -> str:
    """Display label; unknown values fall back to title-cased words ("lab_manual" -> "Lab Manual")."""
    if not resource_type:
        return "Unknown"
    if resource_type in RESOURCE_TYPE_LABELS:
        return RESOURCE_TYPE_LABELS[resource_type]
    return " ".join(word.capitalize() for word in resource_type.split("_") if word)


def course_options(resources: Iterable[Any]) -> List[str]:
    """Distinct course names, ascending."""
    return sorted({r.course_name for r in resources if r.course_name})


def units_for_course(resources: Iterable[Any], course: Optional[str]) -> List[UnitOption]:
    """Units of the selected course, one per unit_id, ordered by unit number.

    Rows without both a unit number and a title are not offered.
    """
    if not course:
        return []
    by_id: Dict[int, UnitOption] = {}
    for r in resources:
        if r.course_name != course or not r.unit_number or not r.unit_title:
            continue
        by_id[r.unit_id] = UnitOption(unit_id=r.unit_id, unit_number=r.unit_number, unit_title=r.unit_title)
    return sorted(by_id.values(), key=lambda u: u.unit_number)


def academic_year_options(resources: Iterable[Any]) -> List[int]:
    """Distinct academic years, most recent first."""
    return sorted({r.academic_year for r in resources if r.academic_year}, reverse=True)


def resource_type_options(resources: Iterable[Any]) -> List[str]:
    """Distinct resource types in order of first appearance."""
    return list(dict.fromkeys(r.resource_type for r in resources if r.resource_type))


def _is_active(value: Any) -> bool:
    return value not in (None, "", ALL)


@dataclass
class ResourceFilter:
    """Current browse selection. Empty or "all" values match everything.

    Selecting a course clears unit, type and year; selecting a unit clears type and year.
    """

    course: str = ""
    unit_id: Optional[int] = None
    resource_type: str = ALL
    year: Union[int, str] = ALL

    def select_course(self, course: Optional[str]) -> None:
        self.course = course or ""
        self.unit_id = None
        self.resource_type = ALL
        self.year = ALL

    def select_unit(self, unit_id: Optional[int]) -> None:
        self.unit_id = unit_id
        self.resource_type = ALL
        self.year = ALL

    def select_resource_type(self, resource_type: Optional[str]) -> None:
        self.resource_type = resource_type or ALL

    def select_year(self, year: Union[int, str, None]) -> None:
        self.year = ALL if year in (None, "") else year

    def matches(self, resource: Any) -> bool:
        if _is_active(self.course) and resource.course_name != self.course:
            return False
        if _is_active(self.unit_id) and resource.unit_id != self.unit_id:
            return False
        if _is_active(self.resource_type) and resource.resource_type != self.resource_type:
            return False
        if _is_active(self.year) and resource.academic_year != int(self.year):
            return False
        return True

    def apply(self, resources: Sequence[Any]) -> List[Any]:
        return [r for r in resources if self.matches(r)]
