import http
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from typing import Optional


# schema
from schema.base import GenericResponseModel
from modules.weight_discrepancy.weight_discrepancy_schema import (
    WeightDiscrepancyInsertModel,
    DisputeResolutionModel,
)

# utils
from utils.response_handler import build_api_response
from utils.permissions import admin_only, get_current_user, require_permission
from utils.jwt_token_handler import UserDataModel

# services
from .weight_discrepancy_service import WeightDiscrepancyService


weight_discrepancy_router = APIRouter(
    prefix="/weight-discrepancies", tags=["weight discrepancy"]
)


@weight_discrepancy_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def list_discrepancies(
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[str] = "all",
    user: UserDataModel = Depends(get_current_user),
):
    try:
        response: GenericResponseModel = WeightDiscrepancyService.list_discrepancies(
            client_id=user.client_id or -1,
            page=page,
            limit=limit,
            search=search,
            status=status,
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="Error fetching weight discrepancies",
            )
        )


@weight_discrepancy_router.post(
    "/{discrepancy_uuid}/raise-dispute",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def raise_dispute(
    discrepancy_uuid: UUID, user: UserDataModel = Depends(get_current_user)
):
    try:
        response: GenericResponseModel = WeightDiscrepancyService.raise_dispute(
            discrepancy_uuid, client_id=user.client_id or -1
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="Error raising dispute",
            )
        )


@weight_discrepancy_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("weight_discrepancies"))],
)
def create_discrepancy(discrepancy_data: WeightDiscrepancyInsertModel):
    try:
        response: GenericResponseModel = WeightDiscrepancyService.create_discrepancy(
            discrepancy_data
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="Error creating weight discrepancy",
            )
        )


@weight_discrepancy_router.post(
    "/{discrepancy_uuid}/resolve",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def resolve_dispute(
    discrepancy_uuid: UUID,
    resolution: DisputeResolutionModel,
    user: UserDataModel = Depends(admin_only),
):
    try:
        response: GenericResponseModel = WeightDiscrepancyService.resolve_dispute(
            discrepancy_uuid, resolution.accepted, actor=user.email or user.role
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="Error resolving dispute",
            )
        )
