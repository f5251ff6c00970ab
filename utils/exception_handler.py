import json
from typing import List, Dict
from pydantic import ValidationError
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logger import logger


# format the validation errors into our desired output
def format_validation_errors(errors: List[dict]) -> Dict:
    formatted_errors = {}

    for error in errors:
        field = error["loc"][-1] if len(error["loc"]) > 1 else "Unknown"
        message = error["msg"]

        formatted_errors.setdefault(str(field), []).append(message)

    return {
        "data": {"fields": formatted_errors},
        "message": "Validation error occurred.",
        "status": False,
    }


def _reject_constant(name):
    raise ValueError("non-finite number {}".format(name))


async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return JSONResponse(status_code=422, content=format_validation_errors(exc.errors()))


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    raw = (await request.body()).decode("utf-8", "ignore")
    logger.error(msg="422 on %s Body: %s Errors: %s" % (request.url, raw, exc.errors()))
    try:
        # NaN and Infinity cannot be echoed back as JSON
        parsed = json.loads(raw, parse_constant=_reject_constant) if raw else None
    except ValueError:
        parsed = raw

    content = format_validation_errors(exc.errors())
    content["body"] = parsed
    return JSONResponse(status_code=422, content=content)


# Custom internal server error handler
async def custom_http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    if exc.status_code == 500:
        logger.error(msg=f"Internal server error: {exc.detail}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later."
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )
