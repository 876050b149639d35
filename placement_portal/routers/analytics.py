"""API routes for placement analytics."""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.analytics import HeatmapResponse
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.offer import OfferAnalytics
from placement_portal.services.dependencies import get_heatmap_service, get_offer_service
from placement_portal.services.heatmap_service import HeatmapService
from placement_portal.services.offer_service import OfferService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/heatmap", response_model=ApiResponse[HeatmapResponse])
async def placement_heatmap(
    user: CurrentUser = Depends(require_roles(Role.STAFF, Role.MENTOR)),
    service: HeatmapService = Depends(get_heatmap_service),
):
    """Department-wise placement figures and heat scores."""
    try:
        return ApiResponse(data=await service.department_stats())
    except SQLAlchemyError as e:
        raise database_error("placement heatmap", e)


@router.get("/offers", response_model=ApiResponse[OfferAnalytics])
async def offer_statistics(
    user: CurrentUser = Depends(require_roles(Role.STAFF, Role.EMPLOYER, Role.MENTOR)),
    service: OfferService = Depends(get_offer_service),
):
    try:
        return ApiResponse(data=await service.analytics(user))
    except ApplicationError as e:
        raise rejected("offer statistics", e)
    except SQLAlchemyError as e:
        raise database_error("offer statistics", e)
