import uuid
from contextvars import ContextVar
from fastapi import Depends
from sqlalchemy.orm import Session
from logger import logger

from database.db import get_db


context_db_session: ContextVar[Session] = ContextVar("db_session", default=None)
context_user_data: ContextVar[str] = ContextVar("user_data", default="")
context_request_id: ContextVar[str] = ContextVar("request_id", default="")

# set by a handler that wants its writes discarded once the request ends
context_set_db_session_rollback: ContextVar[bool] = ContextVar(
    "set_db_session_rollback", default=False
)


async def build_request_context(db: Session = Depends(get_db)):
    """Bind the request's db session and a fresh request id."""
    context_db_session.set(db)
    context_set_db_session_rollback.set(False)

    request_id = str(uuid.uuid4())
    context_request_id.set(request_id)
    logger.info(msg="REQUEST_INITIATED {}".format(request_id))


def get_db_session() -> Session:
    return context_db_session.get()


def get_request_id() -> str:
    return context_request_id.get() or str(uuid.uuid4())
