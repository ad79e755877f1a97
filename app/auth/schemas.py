from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import UserRole


class CurrentUser(BaseModel):
    """Verified identity of the caller. Built per request from the bearer token and passed explicitly to services."""

    id: UUID
    email: Optional[str] = None
    role: str = UserRole.STUDENT.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
