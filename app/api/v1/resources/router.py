from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import ResourceType
from app.core.exceptions import ServiceError
from app.core.storage import ResourceStorage, get_resource_storage
from app.db.session import get_db

from . import filters, service
from .schemas import (
    MessageResponse,
    ResourceEnvelope,
    ResourceFacets,
    ResourceFacetsEnvelope,
    ResourceFileCreate,
    ResourceLinkCreate,
    ResourceListEnvelope,
    ResourceUpdate,
    SignedUrlResponse,
)

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=ResourceListEnvelope)
async def list_resources(
    course: Optional[str] = Query(None, description="Course (subject) name"),
    unit_id: Optional[int] = Query(None),
    resource_type: Optional[str] = Query(None),
    year: Optional[int] = Query(None, description="Academic year start, e.g. 2024"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """All non-deleted resources, newest first. Optional filters narrow the list (all must match)."""
    resource_filter = filters.ResourceFilter(
        course=course or "",
        unit_id=unit_id,
        resource_type=resource_type or filters.ALL,
        year=year if year is not None else filters.ALL,
    )
    data = await service.list_resources(db, resource_filter=resource_filter)
    return ResourceListEnvelope(data=data)


@router.get("/latest", response_model=ResourceListEnvelope)
async def list_latest_resources(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    data = await service.list_resources(db, limit=settings.latest_resources_limit)
    return ResourceListEnvelope(data=data)


@router.get("/facets", response_model=ResourceFacetsEnvelope)
async def get_resource_facets(
    course: Optional[str] = Query(None, description="Selected course; units are listed for it"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Filter options derived from the current resource list."""
    resources = await service.list_resources(db)
    return ResourceFacetsEnvelope(
        data=ResourceFacets(
            courses=filters.course_options(resources),
            units=filters.units_for_course(resources, course),
            academic_years=filters.academic_year_options(resources),
            resource_types=filters.resource_type_options(resources),
        )
    )


@router.post("", response_model=ResourceEnvelope, status_code=status.HTTP_201_CREATED)
async def create_link_resource(
    payload: ResourceLinkCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create an external-link resource."""
    try:
        resource = await service.create_link_resource(db, current_user, payload)
    except ServiceError as e:
        raise ServiceError(e.message, status.HTTP_400_BAD_REQUEST) from e
    return ResourceEnvelope(data=resource)


@router.post("/file", response_model=ResourceEnvelope, status_code=status.HTTP_201_CREATED)
async def create_file_resource(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    subject_code: Optional[str] = Form(None),
    start_year: Optional[int] = Form(None),
    end_year: Optional[int] = Form(None),
    unit_number: Optional[int] = Form(None),
    resource_type: Optional[ResourceType] = Form(None),
    file: Optional[UploadFile] = File(None, description="PDF, at most 10 MB"),
    db: AsyncSession = Depends(get_db),
    storage: ResourceStorage = Depends(get_resource_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Upload a PDF and create a file resource for it."""
    payload = ResourceFileCreate(
        title=title,
        description=description,
        subject_code=subject_code,
        start_year=start_year,
        end_year=end_year,
        unit_number=unit_number,
        resource_type=resource_type,
    )
    try:
        resource = await service.create_file_resource(db, storage, current_user, payload, file)
    except ServiceError as e:
        raise ServiceError(e.message, status.HTTP_400_BAD_REQUEST) from e
    return ResourceEnvelope(data=resource)


@router.get("/signed-url/{resource_id}", response_model=SignedUrlResponse)
async def get_signed_url(
    resource_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: ResourceStorage = Depends(get_resource_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Time-limited download URL for a file resource."""
    signed_url = await service.get_signed_url(db, storage, resource_id)
    return SignedUrlResponse(signedUrl=signed_url, expiresIn=settings.signed_url_expires_in)


@router.get("/{resource_id}/open", response_class=RedirectResponse)
async def open_resource(
    resource_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: ResourceStorage = Depends(get_resource_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Redirect to the file (signed URL) or to the external link."""
    target = await service.get_open_url(db, storage, resource_id)
    return RedirectResponse(target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.put("/{resource_id}", response_model=ResourceEnvelope)
async def update_resource(
    resource_id: UUID,
    payload: ResourceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Edit title and/or description. Contributor or admin only."""
    resource = await service.update_resource(db, current_user, resource_id, payload)
    return ResourceEnvelope(data=resource)


@router.delete("/{resource_id}", response_model=MessageResponse)
async def delete_resource(
    resource_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Soft delete. Contributor or admin only."""
    await service.soft_delete_resource(db, current_user, resource_id)
    return MessageResponse(message="Resource deleted successfully")
