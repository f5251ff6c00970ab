"""
Celery tasks for carrier webhooks.

The scan-push endpoint only enqueues, so Delhivery gets its 200 quickly
and the database work happens here on the webhooks queue.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from celery_app import celery_app
from database.db import SessionLocal
from logger import logger

from modules.shipment.shipment_service import ShipmentService


@celery_app.task(
    bind=True,
    name="modules.shipment.celery_tasks.process_scan_push",
    max_retries=3,
    default_retry_delay=30,
    acks_late=True,
)
def process_scan_push(self, payload: dict):
    """
    Process one Delhivery scan push.

    Malformed payloads are dropped, database errors are retried.
    """
    db: Session = None

    try:
        db = SessionLocal()
        result = ShipmentService.process_scan_push(payload, db=db)
        logger.info(msg=f"Scan push processed: {result}")
        return result

    except ValueError as e:
        logger.error(msg=f"Dropping scan push: {str(e)}")
        return {"success": False, "error": str(e)}

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(msg=f"Scan push failed, retrying: {str(e)}")
        raise self.retry(exc=e)

    finally:
        if db:
            db.close()
