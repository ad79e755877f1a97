from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class ResourceKind(str, Enum):
    """What the resource holds: an uploaded object or a link elsewhere."""

    FILE = "file"
    EXTERNAL_LINK = "external_link"


class ResourceType(str, Enum):
    """Presentation classification shown on resource cards. Independent of ResourceKind."""

    QUESTION_PAPER = "question_paper"
    LECTURE_NOTES = "lecture_notes"
    RESEARCH_PAPER = "research_paper"
    PROJECT_MATERIAL = "project_material"
    NOTES = "notes"
