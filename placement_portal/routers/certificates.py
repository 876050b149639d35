"""API routes for certificates and student employability."""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user
from placement_portal.core.exceptions import (
    ApplicationError,
    NotFoundError,
    PermissionDeniedError,
)
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.certificate import (
    CertificateVerification,
    EmployabilityRecordResponse,
    ReadinessReport,
)
from placement_portal.schemas.common import ApiResponse
from placement_portal.services.certificate_service import CertificateService
from placement_portal.services.dependencies import get_certificate_service

router = APIRouter(prefix="/api", tags=["certificates"])


def _ensure_can_read_student(user: CurrentUser, student_id: int) -> None:
    if user.role == Role.STUDENT and user.id != student_id:
        raise PermissionDeniedError("Students can only view their own records")


@router.get(
    "/certificates/{certificate_id}/verify",
    response_model=ApiResponse[CertificateVerification],
)
async def verify_certificate(
    certificate_id: str,
    service: CertificateService = Depends(get_certificate_service),
):
    """Public verification of a certificate id."""
    try:
        return ApiResponse(data=await service.verify_certificate(certificate_id))
    except SQLAlchemyError as e:
        raise database_error("verify certificate", e)


@router.get("/students/{student_id}/readiness", response_model=ApiResponse[ReadinessReport])
async def placement_readiness(
    student_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service),
):
    try:
        _ensure_can_read_student(user, student_id)
        return ApiResponse(data=await service.readiness_report(student_id))
    except ApplicationError as e:
        raise rejected("placement readiness", e)
    except SQLAlchemyError as e:
        raise database_error("placement readiness", e)


@router.get(
    "/students/{student_id}/employability",
    response_model=ApiResponse[EmployabilityRecordResponse],
)
async def employability_record(
    student_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service),
):
    try:
        _ensure_can_read_student(user, student_id)
        record = await service.get_employability_record(student_id)
        if record is None:
            raise NotFoundError("Employability record for student", student_id)
        return ApiResponse(data=EmployabilityRecordResponse.model_validate(record))
    except ApplicationError as e:
        raise rejected("employability record", e)
    except SQLAlchemyError as e:
        raise database_error("employability record", e)
