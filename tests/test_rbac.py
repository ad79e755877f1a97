import uuid
from types import SimpleNamespace

import pytest

from app.auth.rbac import can_mutate, ensure_can_mutate
from app.auth.schemas import CurrentUser
from app.core.exceptions import ForbiddenError

OWNER = uuid.uuid4()
OTHER = uuid.uuid4()


@pytest.mark.parametrize(
    "user_id, role, allowed",
    [
        (OWNER, "student", True),
        (OWNER, "faculty", True),
        (OWNER, "admin", True),
        (OTHER, "student", False),
        (OTHER, "faculty", False),
        (OTHER, "admin", True),
    ],
)
def test_can_mutate(user_id, role, allowed) -> None:
    resource = SimpleNamespace(contributor_id=OWNER)
    assert can_mutate(resource, CurrentUser(id=user_id, role=role)) is allowed


def test_ensure_can_mutate_message() -> None:
    resource = SimpleNamespace(contributor_id=OWNER)
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_can_mutate(resource, CurrentUser(id=OTHER), "delete")
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "You do not have permission to delete this resource"


def test_ensure_can_mutate_passes_for_owner() -> None:
    ensure_can_mutate(SimpleNamespace(contributor_id=OWNER), CurrentUser(id=OWNER), "update")
