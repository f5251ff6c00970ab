import http
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from typing import Optional


# schema
from schema.base import GenericResponseModel
from modules.remittance.remittance_schema import (
    RemittanceCreateModel,
    RemittanceOrderModel,
    RemittanceReferenceModel,
    RemittanceSettleModel,
)

# utils
from utils.response_handler import build_api_response
from utils.permissions import get_current_user, require_permission
from utils.jwt_token_handler import UserDataModel

# services
from .remittance_service import RemittanceService


remittance_router = APIRouter(prefix="/remittances", tags=["remittance"])


def _error(e: Exception, message: str):
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
            data=str(e),
            message=message,
        )
    )


# ============================================
# CLIENT
# ============================================


@remittance_router.get(
    "/my",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def list_my_remittances(
    state: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: UserDataModel = Depends(get_current_user),
):
    try:
        response: GenericResponseModel = RemittanceService.list_remittances(
            client_id=user.client_id or -1,
            state=state,
            date_from=date_from,
            date_to=date_to,
            search=search,
            page=page,
            limit=limit,
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while fetching the remittances.")


@remittance_router.get(
    "/my/detail",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_my_remittance(
    remittance_number: str, user: UserDataModel = Depends(get_current_user)
):
    try:
        response: GenericResponseModel = RemittanceService.get_remittance(
            remittance_number, client_id=user.client_id or -1
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while fetching the remittance.")


# ============================================
# ADMIN
# ============================================


@remittance_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("remittances"))],
)
def list_remittances(
    client_id: Optional[int] = None,
    state: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    try:
        response: GenericResponseModel = RemittanceService.list_remittances(
            client_id=client_id,
            state=state,
            date_from=date_from,
            date_to=date_to,
            search=search,
            page=page,
            limit=limit,
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while fetching the remittances.")


@remittance_router.get(
    "/detail",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("remittances"))],
)
def get_remittance(remittance_number: str):
    try:
        response: GenericResponseModel = RemittanceService.get_remittance(
            remittance_number
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while fetching the remittance.")


@remittance_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
def create_remittance(
    remittance_data: RemittanceCreateModel,
    user: UserDataModel = Depends(require_permission("remittances")),
):
    try:
        response: GenericResponseModel = RemittanceService.create_remittance(
            remittance_data, uploaded_by=user.email or user.role
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while creating the remittance.")


@remittance_router.post(
    "/add-order",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("remittances"))],
)
def add_order(order_data: RemittanceOrderModel):
    try:
        response: GenericResponseModel = RemittanceService.add_order(
            order_data.remittance_number, order_data.awb_number
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while updating the remittance.")


@remittance_router.post(
    "/remove-order",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("remittances"))],
)
def remove_order(order_data: RemittanceOrderModel):
    try:
        response: GenericResponseModel = RemittanceService.remove_order(
            order_data.remittance_number, order_data.awb_number
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while updating the remittance.")


@remittance_router.post(
    "/process",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("remittances"))],
)
def mark_processing(reference: RemittanceReferenceModel):
    try:
        response: GenericResponseModel = RemittanceService.mark_processing(
            reference.remittance_number
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while updating the remittance.")


@remittance_router.post(
    "/settle",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def mark_settled(
    settle_data: RemittanceSettleModel,
    user: UserDataModel = Depends(require_permission("remittances")),
):
    try:
        response: GenericResponseModel = RemittanceService.mark_settled(
            settle_data.remittance_number,
            bank_transaction_id=settle_data.bank_transaction_id,
            settled_by=user.email or user.role,
        )
        return build_api_response(response)

    except Exception as e:
        return _error(e, "An error occurred while settling the remittance.")
