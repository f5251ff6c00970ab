import http
from fastapi import APIRouter, Request


# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response
from limiter import limiter, TRACKING_RATE_LIMIT

# services
from .shipment_service import ShipmentService


track_router = APIRouter(prefix="/shipment", tags=["Tracking"])


@track_router.get(
    "/track/{awb_number}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
@limiter.limit(TRACKING_RATE_LIMIT)
async def track_shipment(request: Request, awb_number: str):
    try:
        response: GenericResponseModel = ShipmentService.track_shipment(
            awb_number=awb_number
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while tracking the shipment.",
            )
        )
