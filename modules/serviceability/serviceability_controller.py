import http
from fastapi import APIRouter


# schema
from schema.base import GenericResponseModel
from modules.serviceability.serviceability_schema import RateCalculatorParamsModel

# utils
from utils.response_handler import build_api_response

# services
from .serviceability_service import ServiceabilityService


serviceability_router = APIRouter(prefix="/serviceability", tags=["serviceability"])


@serviceability_router.post(
    "/rate-calculator",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def calculate_rate(rate_calculator_params: RateCalculatorParamsModel):
    try:
        response: GenericResponseModel = ServiceabilityService.calculate_rate(
            rate_calculator_params
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while calculating the rate.",
            )
        )
