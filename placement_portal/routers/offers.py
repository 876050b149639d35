"""API routes for placement offers."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.offer import (
    OfferAnalytics,
    OfferContractUpdate,
    OfferCreate,
    OfferRespond,
    OfferResponse,
)
from placement_portal.services.dependencies import get_offer_service
from placement_portal.services.offer_service import OfferService

router = APIRouter(prefix="/api/offers", tags=["offers"])


@router.post(
    "",
    response_model=ApiResponse[OfferResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_offer(
    request: OfferCreate,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: OfferService = Depends(get_offer_service),
):
    """Extend an offer to the applicant."""
    try:
        offer = await service.create(user, request)
        return ApiResponse(data=OfferResponse.model_validate(offer), message="Offer extended")
    except ApplicationError as e:
        raise rejected("create offer", e)
    except SQLAlchemyError as e:
        raise database_error("create offer", e)


@router.get("", response_model=ApiResponse[list[OfferResponse]])
async def list_offers(
    application_id: int | None = None,
    user: CurrentUser = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    try:
        offers = await service.list_for_user(user, application_id)
        return ApiResponse(data=[OfferResponse.model_validate(o) for o in offers])
    except ApplicationError as e:
        raise rejected("list offers", e)
    except SQLAlchemyError as e:
        raise database_error("list offers", e)


@router.get("/analytics", response_model=ApiResponse[OfferAnalytics])
async def offer_analytics(
    user: CurrentUser = Depends(require_roles(Role.STAFF, Role.EMPLOYER, Role.MENTOR)),
    service: OfferService = Depends(get_offer_service),
):
    """Offer counts by status and the acceptance rate."""
    try:
        return ApiResponse(data=await service.analytics(user))
    except ApplicationError as e:
        raise rejected("offer analytics", e)
    except SQLAlchemyError as e:
        raise database_error("offer analytics", e)


@router.get("/{offer_id}", response_model=ApiResponse[OfferResponse])
async def get_offer(
    offer_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    try:
        offer = await service.get_for_user(user, offer_id)
        return ApiResponse(data=OfferResponse.model_validate(offer))
    except ApplicationError as e:
        raise rejected("get offer", e)
    except SQLAlchemyError as e:
        raise database_error("get offer", e)


@router.post("/{offer_id}/respond", response_model=ApiResponse[OfferResponse])
async def respond_to_offer(
    offer_id: int,
    request: OfferRespond,
    user: CurrentUser = Depends(require_roles(Role.STUDENT)),
    service: OfferService = Depends(get_offer_service),
):
    """Accept or reject an offer before its deadline."""
    try:
        offer = await service.respond(user, offer_id, request)
        return ApiResponse(
            data=OfferResponse.model_validate(offer),
            message=f"Offer {request.response.lower()}",
        )
    except ApplicationError as e:
        raise rejected("respond to offer", e)
    except SQLAlchemyError as e:
        raise database_error("respond to offer", e)


@router.post("/{offer_id}/withdraw", response_model=ApiResponse[OfferResponse])
async def withdraw_offer(
    offer_id: int,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: OfferService = Depends(get_offer_service),
):
    try:
        offer = await service.withdraw(user, offer_id)
        return ApiResponse(data=OfferResponse.model_validate(offer), message="Offer withdrawn")
    except ApplicationError as e:
        raise rejected("withdraw offer", e)
    except SQLAlchemyError as e:
        raise database_error("withdraw offer", e)


@router.post("/{offer_id}/contract", response_model=ApiResponse[OfferResponse])
async def update_contract(
    offer_id: int,
    request: OfferContractUpdate,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: OfferService = Depends(get_offer_service),
):
    try:
        offer = await service.update_contract(user, offer_id, request)
        return ApiResponse(data=OfferResponse.model_validate(offer))
    except ApplicationError as e:
        raise rejected("update contract", e)
    except SQLAlchemyError as e:
        raise database_error("update contract", e)
