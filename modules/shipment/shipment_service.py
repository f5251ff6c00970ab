import base64
import binascii
import http
from datetime import timedelta
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# schema
from schema.base import GenericResponseModel

# models
from models import Order, Shipment_Document, Shipment_Tracking_Event
from database.db import time_now

# utils
from utils.datetime import parse_carrier_datetime
from modules.aws_s3.aws_s3 import (
    build_document_s3_key,
    build_s3_url,
    upload_bytes_to_s3,
)
from shipping_partner.delhivery.status_mapping import (
    map_delhivery_status,
    is_terminal,
    DELIVERED,
    NDR,
    RTO_IN_TRANSIT,
    RTO_DELIVERED,
    CANCELLED,
    LOST,
)


MAX_NDR_ATTEMPTS = 3
NEXT_ATTEMPT_DELAY = timedelta(hours=24)


def _iso(value):
    return value.isoformat() if value else None


def decode_base64_image(data: str):
    """Returns (bytes, mime type). Accepts raw base64 or a data: URL."""
    mime_type = "image/jpeg"
    if "," in data:
        prefix, data = data.split(",", 1)
        if prefix.startswith("data:") and ";" in prefix:
            mime_type = prefix[len("data:") : prefix.index(";")] or mime_type

    return base64.b64decode("".join(data.split()), validate=True), mime_type


class ShipmentService:

    @staticmethod
    def apply_status_update(
        order: Order,
        new_status: str,
        event_time=None,
        location: str = "",
        remarks: str = "",
        ndr_reason: str = None,
        nsl_code: str = None,
        cancellation_message: str = None,
        cap_next_attempt: bool = True,
    ) -> bool:
        """
        Move an order to new_status and fill the per-state bookkeeping.
        Returns False when nothing changed. Terminal orders never move.
        With cap_next_attempt=False an NDR past the attempt limit still gets
        a next_attempt_date.
        """
        if order.status == new_status:
            return False

        if is_terminal(order.status):
            logger.warning(
                extra=context_user_data.get(),
                msg="Skipping status update for order {}: {} is terminal, attempted {}".format(
                    order.order_id, order.status, new_status
                ),
            )
            return False

        now = time_now()
        event_time = event_time or now

        # JSON columns are not mutation tracked, always assign new objects
        order.status_history = [
            *(order.status_history or []),
            {
                "status": new_status,
                "timestamp": now.isoformat(),
                "location": location or "",
                "remarks": remarks or "",
            },
        ]
        order.status = new_status

        ndr_info = dict(order.ndr_info) if order.ndr_info else None

        if new_status == DELIVERED:
            order.delivered_date = event_time

        elif new_status == NDR:
            ndr_info = ndr_info or {}
            attempts = (ndr_info.get("ndr_attempts") or 0) + 1

            ndr_info.update(
                {
                    "is_ndr": True,
                    "ndr_attempts": attempts,
                    "last_ndr_date": event_time.isoformat(),
                    "ndr_reason": ndr_reason or "Delivery failed",
                    "next_attempt_date": (
                        _iso(event_time + NEXT_ATTEMPT_DELAY)
                        if attempts < MAX_NDR_ATTEMPTS or not cap_next_attempt
                        else None
                    ),
                    # back into the action required queue
                    "resolution_action": None,
                    "action_history": ndr_info.get("action_history") or [],
                }
            )
            if nsl_code:
                ndr_info["nsl_code"] = nsl_code

            logger.info(
                extra=context_user_data.get(),
                msg="NDR recorded for order {} (attempt {})".format(
                    order.order_id, attempts
                ),
            )

        elif new_status == RTO_IN_TRANSIT:
            if ndr_info:
                ndr_info["is_ndr"] = False

        elif new_status == RTO_DELIVERED:
            order.rto_delivered_date = event_time
            if ndr_info:
                ndr_info["is_ndr"] = False

        elif new_status == CANCELLED:
            order.cancellation_status = CANCELLED
            order.cancellation_date = event_time
            order.cancellation_message = cancellation_message or "Cancelled by courier"

        elif new_status == LOST:
            logger.warning(
                extra=context_user_data.get(),
                msg="Order {} reported lost by courier".format(order.order_id),
            )

        order.ndr_info = ndr_info
        return True

    @staticmethod
    def process_scan_push(payload: dict, db=None) -> dict:
        """
        Store one Delhivery scan push and move the matching order.
        Raises ValueError for payloads without Shipment.AWB.
        """
        db = db or get_db_session()

        shipment = payload.get("Shipment") if isinstance(payload, dict) else None
        if not shipment or not shipment.get("AWB"):
            raise ValueError("Invalid payload: Shipment.AWB is required")

        waybill = str(shipment["AWB"]).strip()
        status_data = shipment.get("Status") or {}

        status_text = (status_data.get("Status") or "").strip()
        status_type = status_data.get("StatusType")
        status_date_time = (
            parse_carrier_datetime(status_data.get("StatusDateTime")) or time_now()
        )
        instructions = status_data.get("Instructions")
        location = status_data.get("StatusLocation") or ""
        reference_no = shipment.get("ReferenceNo")
        nsl_code = shipment.get("NSLCode")

        if Shipment_Tracking_Event.event_exists(
            waybill, status_text, status_date_time, db=db
        ):
            logger.info(
                extra=context_user_data.get(),
                msg="Duplicate scan push for {}: {}".format(waybill, status_text),
            )
            return {"waybill": waybill, "order_updated": False, "duplicate": True}

        event = Shipment_Tracking_Event(
            waybill=waybill,
            reference_no=reference_no,
            status=status_text,
            status_type=status_type,
            status_date_time=status_date_time,
            status_location=location,
            instructions=instructions,
            nsl_code=nsl_code,
            sort_code=shipment.get("Sortcode"),
            pickup_date=parse_carrier_datetime(shipment.get("PickUpDate")),
            raw_payload=payload,
        )

        try:
            db.add(event)
            db.flush()
        except IntegrityError:
            # a concurrent delivery of the same scan won the insert
            db.rollback()
            return {"waybill": waybill, "order_updated": False, "duplicate": True}

        order = Order.find_for_tracking(reference_no, waybill, db=db)
        order_updated = False

        if order is None:
            logger.warning(
                extra=context_user_data.get(),
                msg="No order found for scan push {} / {}".format(waybill, reference_no),
            )
        else:
            mapped_status = map_delhivery_status(status_text, status_type, nsl_code)

            order_updated = ShipmentService.apply_status_update(
                order,
                mapped_status,
                location=location,
                remarks=instructions
                or "Status updated via webhook: {}".format(status_text),
                ndr_reason=instructions or status_text,
                nsl_code=nsl_code,
                cancellation_message=instructions,
            )

            order.courier_status = status_text
            order.status_type = status_type
            order.last_status_update = status_date_time

            event.order_ref = order.id
            db.add(order)

        event.processed = True
        db.commit()

        return {"waybill": waybill, "order_updated": order_updated, "duplicate": False}

    @staticmethod
    def process_document(
        document_type: str,
        waybill: str,
        image_data: str,
        order_id: str = None,
        return_id: str = None,
    ):
        """Decode, upload and record an EPOD / sorter / QC image."""
        db = get_db_session()

        if not waybill or not image_data:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid payload: waybill and image are required",
            )

        try:
            content, mime_type = decode_base64_image(image_data)
        except (binascii.Error, ValueError):
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid payload: image is not valid base64",
            )

        extension = mime_type.split("/")[-1] if "/" in mime_type else "jpg"
        s3_key = build_document_s3_key(document_type, waybill, content, extension)

        try:
            existing = Shipment_Document.document_exists(
                waybill, document_type, build_s3_url(s3_key), db=db
            )
            if existing:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.OK,
                    status=True,
                    message="Document already exists",
                    data={"url": existing.image_url, "duplicate": True},
                )

            upload = upload_bytes_to_s3(content, s3_key, content_type=mime_type)
            if not upload.get("success"):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_GATEWAY,
                    message="Failed to upload {} image".format(document_type),
                )

            order = Order.find_for_tracking(order_id, waybill, db=db)

            document = Shipment_Document(
                waybill=waybill,
                order_id=order_id,
                return_id=return_id,
                document_type=document_type,
                image_url=upload["url"],
                s3_key=upload.get("s3_key"),
                file_size=upload.get("file_size"),
                mime_type=mime_type,
                processed=order is not None,
                order_ref=order.id if order else None,
            )
            db.add(document)

            if order is not None:
                if document_type == "epod":
                    order.epod_url = upload["url"]
                    order.epod_date = time_now()
                elif document_type == "sorter_image" and not order.weight_photo_url:
                    order.weight_photo_url = upload["url"]
                db.add(order)

            db.commit()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Document processed successfully",
                data={"url": upload["url"], "duplicate": False},
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error storing {} for {}: {}".format(document_type, waybill, str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while processing the document.",
            )

    @staticmethod
    def track_shipment(awb_number: str):
        try:
            db = get_db_session()

            order = (
                db.query(Order)
                .filter(Order.awb_number == awb_number, Order.is_deleted.is_(False))
                .first()
            )

            if order is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Shipment not found",
                )

            events = Shipment_Tracking_Event.for_waybill(awb_number, db=db)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Tracking fetched successfully",
                data={
                    "awb_number": order.awb_number,
                    "order_id": order.order_id,
                    "courier_partner": order.courier_partner,
                    "status": order.status,
                    "courier_status": order.courier_status,
                    "last_status_update": _iso(order.last_status_update),
                    "delivered_date": _iso(order.delivered_date),
                    "status_history": order.status_history or [],
                    "ndr_info": order.ndr_info,
                    "events": [event.to_dict() for event in events],
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error tracking {}: {}".format(awb_number, str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while tracking the shipment.",
            )
