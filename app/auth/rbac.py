from app.auth.schemas import CurrentUser
from app.core.exceptions import ForbiddenError
from app.core.models import Resource


def can_mutate(resource: Resource, current_user: CurrentUser) -> bool:
    """Admins may change any resource; everyone else only what they contributed."""
    if current_user.is_admin:
        return True
    return resource.contributor_id == current_user.id


def ensure_can_mutate(resource: Resource, current_user: CurrentUser, action: str) -> None:
    """Raise ForbiddenError unless can_mutate. `action` is used in the message (update, delete)."""
    if not can_mutate(resource, current_user):
        raise ForbiddenError(f"You do not have permission to {action} this resource")
