"""
Re-sync orders whose scan pushes were missed.

Orders still sitting in a pre-delivery state are re-tracked against the
Delhivery packages API and moved to whatever the carrier reports now.
Only statuses that map cleanly (strict mode) are applied.
"""

import time

from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import get_db_session

from logger import logger

# models
from models import Order

# utils
from shipping_partner.delhivery.delhivery import Delhivery
from shipping_partner.delhivery.status_mapping import (
    map_delhivery_status,
    DELIVERED,
    NDR,
)
from modules.shipment.shipment_service import ShipmentService


CANDIDATE_STATUSES = [
    "in_transit",
    "out_for_delivery",
    "pickups_manifests",
    "ready_to_ship",
]

DEFAULT_DELAY = 0.3


class ReconciliationService:

    @staticmethod
    def find_candidates(db):
        return (
            db.query(Order)
            .filter(
                Order.status.in_(CANDIDATE_STATUSES),
                Order.awb_number.isnot(None),
                Order.awb_number != "",
                Order.is_deleted.is_(False),
            )
            .order_by(Order.id.asc())
            .all()
        )

    @staticmethod
    def fix_missed_statuses(dry_run: bool = False, delay: float = DEFAULT_DELAY, db=None):
        db = db or get_db_session()

        summary = {
            "dry_run": dry_run,
            "total": 0,
            "ndr_fixed": 0,
            "delivered_fixed": 0,
            "rto_fixed": 0,
            "already_correct": 0,
            "skipped": 0,
            "errors": 0,
            "fixed_orders": [],
        }

        candidates = ReconciliationService.find_candidates(db)
        summary["total"] = len(candidates)

        logger.info(
            msg="Reconciling {} orders{}".format(
                len(candidates), " (dry run)" if dry_run else ""
            )
        )

        for index, order in enumerate(candidates):
            if index and delay:
                time.sleep(delay)

            awb = order.awb_number

            try:
                response = Delhivery.fetch_tracking(awb, order.courier_partner)
                latest = (response.data or {}).get("Status") if response.status else None

                if not latest:
                    summary["skipped"] += 1
                    continue

                new_status = map_delhivery_status(
                    latest.get("Status"),
                    latest.get("StatusType"),
                    latest.get("StatusCode"),
                    strict=True,
                )

                if new_status is None:
                    summary["skipped"] += 1
                    continue

                if new_status == order.status:
                    summary["already_correct"] += 1
                    continue

                status_code = latest.get("StatusCode") or ""
                instructions = latest.get("Instructions") or ""
                old_status = order.status

                if not dry_run:
                    ShipmentService.apply_status_update(
                        order,
                        new_status,
                        event_time=Delhivery.date_formatter(latest.get("StatusDateTime")),
                        location=latest.get("StatusLocation") or "",
                        remarks="Auto-sync fix - {}: {}".format(status_code, instructions),
                        ndr_reason=instructions,
                        nsl_code=status_code,
                        cancellation_message=instructions,
                        cap_next_attempt=False,
                    )
                    db.add(order)
                    db.commit()

                if new_status == NDR:
                    summary["ndr_fixed"] += 1
                elif new_status == DELIVERED:
                    summary["delivered_fixed"] += 1
                elif new_status.startswith("rto"):
                    summary["rto_fixed"] += 1

                summary["fixed_orders"].append(
                    {
                        "order_id": order.order_id,
                        "awb": awb,
                        "old_status": old_status,
                        "new_status": new_status,
                        "status_code": status_code,
                        "reason": instructions,
                    }
                )

            except SQLAlchemyError as e:
                db.rollback()
                summary["errors"] += 1
                logger.error(msg="Failed to update {}: {}".format(awb, str(e)))

        return summary
