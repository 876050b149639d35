"""API routes for internship postings."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.internship import (
    InternshipCreate,
    InternshipResponse,
    InternshipUpdate,
)
from placement_portal.services.dependencies import get_internship_service
from placement_portal.services.internship_service import InternshipService

router = APIRouter(prefix="/api/internships", tags=["internships"])

posters = require_roles(Role.EMPLOYER, Role.STAFF)


@router.get("", response_model=ApiResponse[list[InternshipResponse]])
async def list_internships(
    department: str | None = None,
    mine: bool = False,
    user: CurrentUser = Depends(get_current_user),
    service: InternshipService = Depends(get_internship_service),
):
    """Active postings, optionally only those open to a department.

    With ``mine=true`` an employer sees all of their own postings, inactive ones
    included.
    """
    try:
        if mine:
            internships = await service.list_postings(
                posted_by=user.id, include_inactive=True
            )
        else:
            internships = await service.list_postings(department=department)
        return ApiResponse(data=[InternshipResponse.model_validate(i) for i in internships])
    except SQLAlchemyError as e:
        raise database_error("list internships", e)


@router.post(
    "",
    response_model=ApiResponse[InternshipResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_internship(
    request: InternshipCreate,
    user: CurrentUser = Depends(posters),
    service: InternshipService = Depends(get_internship_service),
):
    try:
        internship = await service.create(user, request)
        return ApiResponse(
            data=InternshipResponse.model_validate(internship),
            message="Internship posted",
        )
    except SQLAlchemyError as e:
        raise database_error("create internship", e)


@router.get("/{internship_id}", response_model=ApiResponse[InternshipResponse])
async def get_internship(
    internship_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: InternshipService = Depends(get_internship_service),
):
    try:
        internship = await service.get(
            internship_id, include_inactive=user.role != Role.STUDENT
        )
        return ApiResponse(data=InternshipResponse.model_validate(internship))
    except ApplicationError as e:
        raise rejected("get internship", e)
    except SQLAlchemyError as e:
        raise database_error("get internship", e)


@router.put("/{internship_id}", response_model=ApiResponse[InternshipResponse])
async def update_internship(
    internship_id: int,
    request: InternshipUpdate,
    user: CurrentUser = Depends(posters),
    service: InternshipService = Depends(get_internship_service),
):
    try:
        internship = await service.update(user, internship_id, request)
        return ApiResponse(data=InternshipResponse.model_validate(internship))
    except ApplicationError as e:
        raise rejected("update internship", e)
    except SQLAlchemyError as e:
        raise database_error("update internship", e)


@router.delete("/{internship_id}", response_model=ApiResponse[InternshipResponse])
async def delete_internship(
    internship_id: int,
    user: CurrentUser = Depends(posters),
    service: InternshipService = Depends(get_internship_service),
):
    """Deactivate a posting; existing applications are kept."""
    try:
        internship = await service.deactivate(user, internship_id)
        return ApiResponse(
            data=InternshipResponse.model_validate(internship),
            message="Internship deactivated",
        )
    except ApplicationError as e:
        raise rejected("delete internship", e)
    except SQLAlchemyError as e:
        raise database_error("delete internship", e)
