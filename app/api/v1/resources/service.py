import logging
import re
import time
import uuid
from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.rbac import ensure_can_mutate
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import ResourceKind
from app.core.exceptions import GoneError, NotFoundError, ServiceError, StorageError, ValidationError
from app.core.models import AcademicYear, Resource, Subject, SubjectOffering, Unit
from app.core.storage import ResourceStorage

from .filters import ResourceFilter
from .resolver import ResolvedScope, resolve_scope
from .schemas import (
    ResourceFileCreate,
    ResourceLinkCreate,
    ResourceListItem,
    ResourceResponse,
    ResourceUpdate,
)

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
LINK_REQUIRED_FIELDS = ("title", "description", "subject_code", "start_year", "end_year", "external_url")
FILE_REQUIRED_FIELDS = ("title", "description", "subject_code", "start_year", "end_year")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_URL_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with '_', one for one."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_storage_path(
    subject_id: int,
    offering_id: int,
    unit_id: Optional[int],
    filename: str,
    timestamp_ms: Optional[int] = None,
) -> str:
    """{subject}/{offering}[/{unit}]/{epoch_ms}-{sanitized filename}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    parts = [str(subject_id), str(offering_id)]
    if unit_id is not None:
        parts.append(str(unit_id))
    parts.append(f"{timestamp_ms}-{sanitize_filename(filename)}")
    return "/".join(parts)


def normalize_external_url(url: str) -> str:
    url = url.strip()
    if _URL_SCHEME.match(url):
        return url
    return f"https://{url}"


def _missing_fields(payload, fields: Iterable[str]) -> List[str]:
    missing = []
    for name in fields:
        value = getattr(payload, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def _require_fields(payload, fields: Iterable[str]) -> None:
    missing = _missing_fields(payload, fields)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


async def read_pdf_upload(file: Optional[UploadFile], max_bytes: int) -> bytes:
    """Accept only a non-empty PDF of at most max_bytes. Returns its content."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    if file.content_type != PDF_MIME_TYPE:
        raise ValidationError("Only PDF files are allowed")
    content = await file.read(max_bytes + 1)
    if not content:
        raise ValidationError("No file uploaded")
    if len(content) > max_bytes:
        raise ValidationError(f"File too large (max {max_bytes // (1024 * 1024)} MB)")
    return content


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _listing_stmt():
    return (
        select(
            Resource.id,
            Resource.title,
            Resource.description,
            Resource.kind,
            Resource.resource_type,
            Resource.external_url,
            Resource.created_at,
            Resource.contributor_id,
            User.full_name.label("contributor_name"),
            Subject.id.label("subject_id"),
            Subject.code.label("subject_code"),
            Subject.name.label("subject_name"),
            AcademicYear.start_year,
            AcademicYear.end_year,
            Unit.id.label("unit_id"),
            Unit.unit_number,
            Unit.title.label("unit_title"),
        )
        .select_from(Resource)
        .join(Subject, Resource.subject_id == Subject.id)
        .outerjoin(SubjectOffering, Resource.subject_offering_id == SubjectOffering.id)
        .outerjoin(AcademicYear, SubjectOffering.academic_year_id == AcademicYear.id)
        .outerjoin(Unit, Resource.unit_id == Unit.id)
        .outerjoin(User, Resource.contributor_id == User.id)
        .where(Resource.is_deleted.is_(False))
        .order_by(Resource.created_at.desc())
    )


async def list_resources(
    db: AsyncSession,
    limit: Optional[int] = None,
    resource_filter: Optional[ResourceFilter] = None,
) -> List[ResourceListItem]:
    """Non-deleted resources, newest first."""
    stmt = _listing_stmt()
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    items = [ResourceListItem.model_validate(dict(row._mapping)) for row in result.all()]
    if resource_filter is not None:
        items = resource_filter.apply(items)
    return items


async def get_resource(db: AsyncSession, resource_id: UUID) -> Optional[Resource]:
    """Any resource by id, deleted or not."""
    result = await db.execute(select(Resource).where(Resource.id == resource_id))
    return result.scalar_one_or_none()


async def _get_active_resource(db: AsyncSession, resource_id: UUID) -> Resource:
    resource = await get_resource(db, resource_id)
    if resource is None or resource.is_deleted:
        raise NotFoundError("resource", "Resource not found")
    return resource


# ---------------------------------------------------------------------------
# Write pipeline
# ---------------------------------------------------------------------------


async def _insert_resource(
    db: AsyncSession,
    scope: ResolvedScope,
    current_user: CurrentUser,
    *,
    title: str,
    description: str,
    kind: ResourceKind,
    resource_type: Optional[str],
    storage_path: Optional[str] = None,
    external_url: Optional[str] = None,
) -> Resource:
    resource = Resource(
        id=uuid.uuid4(),
        subject_id=scope.subject.id,
        subject_offering_id=scope.offering.id,
        unit_id=scope.unit_id,
        title=title,
        description=description,
        kind=kind.value,
        resource_type=resource_type,
        storage_path=storage_path,
        external_url=external_url,
        contributor_id=current_user.id,
        is_deleted=False,
    )
    db.add(resource)
    await db.flush()
    return resource


async def create_link_resource(
    db: AsyncSession,
    current_user: CurrentUser,
    payload: ResourceLinkCreate,
) -> ResourceResponse:
    _require_fields(payload, LINK_REQUIRED_FIELDS)
    try:
        scope = await resolve_scope(
            db, payload.subject_code.strip(), payload.start_year, payload.end_year, payload.unit_number
        )
        resource = await _insert_resource(
            db,
            scope,
            current_user,
            title=payload.title.strip(),
            description=payload.description.strip(),
            kind=ResourceKind.EXTERNAL_LINK,
            resource_type=payload.resource_type.value if payload.resource_type else None,
            external_url=normalize_external_url(payload.external_url),
        )
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning("Link resource creation rolled back: %s", e)
        if isinstance(e, ServiceError):
            raise
        raise ServiceError(str(e)) from e
    logger.info("Resource %s (external_link) created by %s", resource.id, current_user.id)
    return ResourceResponse.model_validate(resource)


async def _discard_upload(storage: ResourceStorage, path: str) -> None:
    """Remove an object whose row never got committed. The original failure is what the caller sees."""
    try:
        await storage.remove(path)
    except StorageError as e:
        logger.error("Orphaned upload left at %s: %s", path, e.message)


async def create_file_resource(
    db: AsyncSession,
    storage: ResourceStorage,
    current_user: CurrentUser,
    payload: ResourceFileCreate,
    file: Optional[UploadFile],
) -> ResourceResponse:
    _require_fields(payload, FILE_REQUIRED_FIELDS)
    content = await read_pdf_upload(file, settings.max_upload_bytes)

    uploaded_path: Optional[str] = None
    try:
        scope = await resolve_scope(
            db, payload.subject_code.strip(), payload.start_year, payload.end_year, payload.unit_number
        )
        storage_path = build_storage_path(scope.subject.id, scope.offering.id, scope.unit_id, file.filename)
        await storage.upload(storage_path, content, file.content_type)
        uploaded_path = storage_path
        resource = await _insert_resource(
            db,
            scope,
            current_user,
            title=payload.title.strip(),
            description=payload.description.strip(),
            kind=ResourceKind.FILE,
            resource_type=payload.resource_type.value if payload.resource_type else None,
            storage_path=storage_path,
        )
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning("File resource creation rolled back: %s", e)
        if uploaded_path is not None:
            await _discard_upload(storage, uploaded_path)
        if isinstance(e, ServiceError):
            raise
        raise ServiceError(str(e)) from e
    logger.info("Resource %s (file) created by %s at %s", resource.id, current_user.id, storage_path)
    return ResourceResponse.model_validate(resource)


# ---------------------------------------------------------------------------
# Mutations guarded by owner-or-admin
# ---------------------------------------------------------------------------


async def update_resource(
    db: AsyncSession,
    current_user: CurrentUser,
    resource_id: UUID,
    payload: ResourceUpdate,
) -> ResourceResponse:
    changes = payload.changes()
    if not changes:
        raise ValidationError("At least one field (title or description) is required")
    resource = await _get_active_resource(db, resource_id)
    ensure_can_mutate(resource, current_user, "update")
    for field, value in changes.items():
        setattr(resource, field, value)
    await db.commit()
    await db.refresh(resource)
    return ResourceResponse.model_validate(resource)


async def soft_delete_resource(
    db: AsyncSession,
    current_user: CurrentUser,
    resource_id: UUID,
) -> None:
    """Flag the row deleted. The row and any stored object stay."""
    resource = await _get_active_resource(db, resource_id)
    ensure_can_mutate(resource, current_user, "delete")
    resource.is_deleted = True
    await db.commit()
    logger.info("Resource %s soft-deleted by %s", resource_id, current_user.id)


# ---------------------------------------------------------------------------
# Read access to content
# ---------------------------------------------------------------------------


async def get_signed_url(db: AsyncSession, storage: ResourceStorage, resource_id: UUID) -> str:
    resource = await get_resource(db, resource_id)
    if resource is None:
        raise NotFoundError("resource", "Resource not found")
    if resource.kind != ResourceKind.FILE.value:
        raise ValidationError("Resource is not a file")
    if resource.is_deleted:
        raise GoneError()
    return await storage.create_signed_url(resource.storage_path, settings.signed_url_expires_in)


async def get_open_url(db: AsyncSession, storage: ResourceStorage, resource_id: UUID) -> str:
    """Where a "view resource" click should land: a fresh signed URL or the external link."""
    resource = await get_resource(db, resource_id)
    if resource is None:
        raise NotFoundError("resource", "Resource not found")
    if resource.is_deleted:
        raise GoneError()
    if resource.kind == ResourceKind.FILE.value:
        return await storage.create_signed_url(resource.storage_path, settings.signed_url_expires_in)
    if not resource.external_url:
        raise ValidationError("Resource has no external URL")
    return normalize_external_url(resource.external_url)
