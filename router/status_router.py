import http
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.db import db_engine
from logger import logger

StatusRouter = APIRouter(tags=["health_checks"])


# liveness
@StatusRouter.get("/status", status_code=http.HTTPStatus.OK)
async def status_check():
    return JSONResponse(status_code=http.HTTPStatus.OK, content={"status": "OK"})


# readiness, needs a working database connection
@StatusRouter.get("/deepstatus", status_code=http.HTTPStatus.OK)
def deep_status_check():
    try:
        with db_engine.connect() as connection:
            is_db_ok = connection.execute(text("SELECT 1")).scalar() == 1

    except SQLAlchemyError as e:
        logger.error(msg=f"Deep status check failed: {str(e)}")
        is_db_ok = False

    if not is_db_ok:
        return JSONResponse(
            status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"db": False, "error": "db not connected"},
        )

    return JSONResponse(status_code=http.HTTPStatus.OK, content={"db": True})
