import http
from fastapi import APIRouter, Depends


# schema
from schema.base import GenericResponseModel
from modules.rate_card.rate_card_schema import RateCardInsertModel

# utils
from utils.response_handler import build_api_response
from utils.permissions import require_permission
from utils.jwt_token_handler import UserDataModel

# services
from .rate_card_service import RateCardService


rate_card_router = APIRouter(prefix="/rate-cards", tags=["rate card"])


@rate_card_router.get(
    "/carrier/{carrier_id}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("rate_cards"))],
)
def get_current_rate_cards(carrier_id: int):
    try:
        response: GenericResponseModel = RateCardService.get_current_rate_cards(
            carrier_id
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the rate cards.",
            )
        )


@rate_card_router.get(
    "/carrier/{carrier_id}/history",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(require_permission("rate_cards"))],
)
def get_rate_history(carrier_id: int, user_category: str):
    try:
        response: GenericResponseModel = RateCardService.get_rate_history(
            carrier_id, user_category
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the rate history.",
            )
        )


@rate_card_router.post(
    "/carrier/{carrier_id}/versions",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
def create_rate_card_version(
    carrier_id: int,
    rate_card_data: RateCardInsertModel,
    user: UserDataModel = Depends(require_permission("rate_cards")),
):
    try:
        response: GenericResponseModel = RateCardService.create_new_version(
            carrier_id, rate_card_data, updated_by=user.email or str(user.id)
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while creating the rate card version.",
            )
        )


@rate_card_router.get(
    "/my",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_my_rate_card():
    try:
        response: GenericResponseModel = RateCardService.get_client_rate_cards()
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while fetching the rate card.",
            )
        )
