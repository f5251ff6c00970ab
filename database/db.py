"""
Database Configuration Module

Connection settings come from the environment:
- DATABASE_URL wins when set (sqlite URLs are accepted for local runs and tests)
- otherwise a PostgreSQL URI is composed from db_user / db_password / db_host / db_port / db_name
"""

import os
import uuid as uuid
from datetime import datetime
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pytz import timezone

load_dotenv()

from sqlalchemy import Column, TIMESTAMP, Boolean, Integer, Uuid, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from logger import logging


# ============================================
# DATABASE CONNECTION CONFIGURATION
# ============================================

DBTYPE_POSTGRES = "postgresql"


def build_database_uri() -> str:
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    return "%s://%s:%s@%s:%s/%s" % (
        DBTYPE_POSTGRES,
        os.environ.get("db_user", "postgres"),
        quote_plus(os.environ.get("db_password", "")),
        os.environ.get("db_host", "localhost"),
        os.environ.get("db_port", "5432"),
        os.environ.get("db_name", "shipsarthi"),
    )


CORE_SQLALCHEMY_DATABASE_URI = build_database_uri()

# ============================================
# CONNECTION POOL SETTINGS
# ============================================

if CORE_SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    # single shared connection so in-memory databases survive across sessions
    POOL_CONFIG = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
        "echo": False,
    }
else:
    POOL_CONFIG = {
        "pool_size": 30,
        "max_overflow": 20,
        "pool_timeout": 30,
        # handles stale connections
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "echo": False,
        "poolclass": QueuePool,
    }

db_engine = create_engine(
    CORE_SQLALCHEMY_DATABASE_URI,
    **POOL_CONFIG,
)

# ============================================
# SESSION CONFIGURATION
# ============================================

SessionLocal = sessionmaker(
    autoflush=False,
    bind=db_engine,
    expire_on_commit=False,
)

UTC = timezone("UTC")
IST = timezone("Asia/Kolkata")


def time_now():
    """Get current UTC time"""
    return datetime.now(UTC)


def time_now_ist():
    """Get current IST time"""
    return datetime.now(IST)


@event.listens_for(db_engine, "checkout")
def receive_checkout(dbapi_connection, connection_record, connection_proxy):
    logging.debug("Connection checked out from pool")


@event.listens_for(db_engine, "checkin")
def receive_checkin(dbapi_connection, connection_record):
    logging.debug("Connection returned to pool")


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models():
    """Create all tables known to the metadata."""
    import models  # noqa: F401  registers every table on DBBase

    DBBase.metadata.create_all(bind=db_engine)
    logging.info("Database tables initialised")


# ============================================
# SESSION MANAGEMENT
# ============================================


def get_db():
    """
    Generator for database session dependency injection.

    Commits on success unless the request flagged a rollback,
    rolls back on error, always closes.
    """
    from context_manager.context import context_set_db_session_rollback

    db: Session = SessionLocal()
    try:
        logging.debug("DB session created")
        yield db

        if context_set_db_session_rollback.get():
            logging.debug("Rolling back DB session")
            db.rollback()
        else:
            logging.debug("Committing DB session")
            db.commit()

    except Exception as e:
        logging.error(f"DB session error: {e}")
        db.rollback()
        raise
    finally:
        logging.debug("Closing DB session")
        db.close()


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides an auto-incrementing primary key, a UUID for external
    references, created/updated timestamps and a soft delete flag.
    """

    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)

    # UUID for external API references (don't expose internal IDs)
    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        default=time_now,
        onupdate=time_now,
        nullable=False,
    )

    is_deleted = Column(Boolean, default=False, index=True)

    @classmethod
    def get_by_uuid(cls, uuid):
        from context_manager.context import get_db_session

        db: Session = get_db_session()
        return db.query(cls).filter(cls.uuid == uuid, cls.is_deleted.is_(False)).first()

    @classmethod
    def get_by_id(cls, id):
        from context_manager.context import get_db_session

        db: Session = get_db_session()
        return db.query(cls).filter(cls.id == id, cls.is_deleted.is_(False)).first()

    def to_dict(self):
        return {
            "id": self.id,
            "uuid": str(self.uuid),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
