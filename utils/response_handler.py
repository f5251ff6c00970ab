import http
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from schema.base import GenericResponseModel
from context_manager.context import context_user_data
from logger import logger


def build_api_response(generic_response: GenericResponseModel) -> JSONResponse:
    """
    Turn a service result into the JSON envelope every route returns:
    {"status", "message", "data"} with the HTTP status taken from status_code.
    """
    try:
        content = jsonable_encoder(generic_response, exclude={"status_code"})
        status_code = int(generic_response.status_code)

        if status_code >= http.HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(
                extra=context_user_data.get(),
                msg="Responding {}: {}".format(status_code, generic_response.message),
            )
        else:
            logger.info(
                extra=context_user_data.get(),
                msg="Responding {}".format(status_code),
            )

        return JSONResponse(status_code=status_code, content=content)

    except (TypeError, ValueError) as e:
        logger.error(
            extra=context_user_data.get(),
            msg="Could not serialise response: {}".format(str(e)),
        )
        return JSONResponse(
            status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"status": False, "message": "Could not build response", "data": {}},
        )
