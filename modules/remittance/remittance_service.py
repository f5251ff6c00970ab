import http
from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.remittance.remittance_schema import (
    RemittanceCreateModel,
    RemittanceLineResponseModel,
    RemittanceResponseModel,
)

# models
from models import Client, Order, Remittance, Remittance_Order
from models.remittance import REMITTANCE_STATES, LEGACY_STATE_MAPPING
from database.db import IST, time_now_ist

# utils
from .remittance_helper import (
    generate_remittance_number,
    get_next_friday,
    validate_awb_for_remittance,
)


def normalize_state(state: Optional[str]) -> Optional[str]:
    if not state:
        return None
    state = state.strip().lower()
    return LEGACY_STATE_MAPPING.get(state, state)


def serialize_remittance(remittance: Remittance, include_orders: bool = False):
    return RemittanceResponseModel(
        remittance_number=remittance.remittance_number,
        client_id=remittance.client_id,
        date=remittance.date,
        remittance_date=remittance.remittance_date,
        state=normalize_state(remittance.state),
        total_remittance=float(remittance.total_remittance or 0),
        total_orders=remittance.total_orders or 0,
        bank_transaction_id=remittance.bank_transaction_id,
        processed_on=remittance.processed_on,
        settlement_date=remittance.settlement_date,
        settled_by=remittance.settled_by,
        account_details=remittance.account_details,
        uploaded_by=remittance.uploaded_by,
        orders=(
            [
                RemittanceLineResponseModel(
                    awb_number=line.awb_number,
                    order_id=line.order_id,
                    amount_collected=float(line.amount_collected),
                    delivered_date=line.delivered_date,
                )
                for line in remittance.remittance_orders
            ]
            if include_orders
            else None
        ),
    )


def _not_found():
    return GenericResponseModel(
        status_code=http.HTTPStatus.NOT_FOUND,
        message="Remittance not found",
    )


class RemittanceService:

    @staticmethod
    def _awbs_in_remittances(db, awbs: List[str]):
        """awb -> remittance number for AWBs already in any live remittance."""
        rows = (
            db.query(Remittance_Order.awb_number, Remittance.remittance_number)
            .join(Remittance, Remittance.id == Remittance_Order.remittance_id)
            .filter(
                Remittance_Order.awb_number.in_(awbs),
                Remittance.is_deleted.is_(False),
            )
            .all()
        )
        return {awb: number for awb, number in rows}

    @staticmethod
    def create_remittance(remittance_data: RemittanceCreateModel, uploaded_by: str = "admin"):
        db = get_db_session()

        try:
            client = db.query(Client).filter(Client.id == remittance_data.client_id).first()
            if client is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Client not found",
                )

            awbs = list(dict.fromkeys(awb.strip() for awb in remittance_data.awbs if awb.strip()))

            orders = {
                order.awb_number: order
                for order in db.query(Order)
                .filter(
                    Order.awb_number.in_(awbs),
                    Order.client_id == client.id,
                    Order.is_deleted.is_(False),
                )
                .all()
            }
            awb_to_remittance = RemittanceService._awbs_in_remittances(db, awbs)

            valid_orders = []
            invalid_awbs = []
            for awb in awbs:
                valid, reason = validate_awb_for_remittance(
                    orders.get(awb), set(awb_to_remittance), awb_to_remittance
                )
                if valid:
                    valid_orders.append(orders[awb])
                else:
                    invalid_awbs.append({"awb": awb, "reason": reason})

            if not valid_orders:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="No valid AWBs found for remittance",
                    data={"invalid_awbs": invalid_awbs},
                )

            date = remittance_data.date or time_now_ist()
            # payout Fridays are IST calendar days
            remittance_date = get_next_friday(date.astimezone(IST) if date.tzinfo else date)

            remittance = Remittance(
                remittance_number=generate_remittance_number(
                    db, client.client_code, remittance_date
                ),
                client_id=client.id,
                date=date,
                remittance_date=remittance_date,
                state="upcoming",
                account_details=remittance_data.account_details,
                uploaded_by=uploaded_by,
                upload_batch_id=remittance_data.upload_batch_id,
            )

            for order in valid_orders:
                remittance.add_order(
                    awb_number=order.awb_number,
                    amount_collected=order.cod_amount,
                    order_id=order.order_id,
                    order_ref=order.id,
                    delivered_date=order.delivered_date,
                )

            db.add(remittance)
            db.commit()

            logger.info(
                extra=context_user_data.get(),
                msg="Remittance {} created with {} orders".format(
                    remittance.remittance_number, remittance.total_orders
                ),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Remittance created successfully",
                data={
                    "remittance": serialize_remittance(remittance, include_orders=True),
                    "valid_awbs": [order.awb_number for order in valid_orders],
                    "invalid_awbs": invalid_awbs,
                },
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error creating remittance: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while creating the remittance.",
            )

    @staticmethod
    def add_order(remittance_number: str, awb_number: str):
        db = get_db_session()

        try:
            remittance = Remittance.get_by_remittance_number(remittance_number, db=db)
            if remittance is None:
                return _not_found()

            if normalize_state(remittance.state) == "settled":
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Cannot modify a settled remittance",
                )

            if any(line.awb_number == awb_number for line in remittance.remittance_orders):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.OK,
                    status=True,
                    message="AWB already in remittance",
                    data=serialize_remittance(remittance, include_orders=True),
                )

            order = (
                db.query(Order)
                .filter(
                    Order.awb_number == awb_number,
                    Order.client_id == remittance.client_id,
                    Order.is_deleted.is_(False),
                )
                .first()
            )
            awb_to_remittance = RemittanceService._awbs_in_remittances(db, [awb_number])

            valid, reason = validate_awb_for_remittance(
                order, set(awb_to_remittance), awb_to_remittance
            )
            if not valid:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message=reason,
                )

            remittance.add_order(
                awb_number=order.awb_number,
                amount_collected=order.cod_amount,
                order_id=order.order_id,
                order_ref=order.id,
                delivered_date=order.delivered_date,
            )
            db.add(remittance)
            db.commit()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Order added to remittance",
                data=serialize_remittance(remittance, include_orders=True),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error adding {} to remittance: {}".format(awb_number, str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the remittance.",
            )

    @staticmethod
    def remove_order(remittance_number: str, awb_number: str):
        db = get_db_session()

        try:
            remittance = Remittance.get_by_remittance_number(remittance_number, db=db)
            if remittance is None:
                return _not_found()

            if normalize_state(remittance.state) == "settled":
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Cannot modify a settled remittance",
                )

            if not remittance.remove_order(awb_number):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="AWB not found in remittance",
                )

            db.add(remittance)
            db.commit()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Order removed from remittance",
                data=serialize_remittance(remittance, include_orders=True),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error removing {} from remittance: {}".format(awb_number, str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the remittance.",
            )

    @staticmethod
    def mark_processing(remittance_number: str):
        db = get_db_session()

        try:
            remittance = Remittance.get_by_remittance_number(remittance_number, db=db)
            if remittance is None:
                return _not_found()

            if normalize_state(remittance.state) != "upcoming":
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Only upcoming remittances can be moved to processing",
                )

            remittance.mark_processing()
            db.add(remittance)
            db.commit()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Remittance marked as processing",
                data=serialize_remittance(remittance),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error updating remittance state: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while updating the remittance.",
            )

    @staticmethod
    def mark_settled(
        remittance_number: str, bank_transaction_id: str = None, settled_by: str = "admin"
    ):
        db = get_db_session()

        try:
            remittance = Remittance.get_by_remittance_number(remittance_number, db=db)
            if remittance is None:
                return _not_found()

            if normalize_state(remittance.state) == "settled":
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Remittance is already settled",
                )

            remittance.mark_settled(bank_transaction_id, settled_by)

            awbs = [line.awb_number for line in remittance.remittance_orders]
            if awbs:
                db.query(Order).filter(
                    Order.awb_number.in_(awbs),
                    Order.client_id == remittance.client_id,
                ).update({Order.cod_remitted: True}, synchronize_session="fetch")

            db.add(remittance)
            db.commit()

            logger.info(
                extra=context_user_data.get(),
                msg="Remittance {} settled by {}".format(remittance_number, settled_by),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Remittance settled successfully",
                data=serialize_remittance(remittance),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error settling remittance: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while settling the remittance.",
            )

    @staticmethod
    def list_remittances(
        client_id: Optional[int] = None,
        state: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ):
        try:
            db = get_db_session()

            state = normalize_state(state)
            if state and state not in REMITTANCE_STATES:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid state {}".format(state),
                )

            query = db.query(Remittance).filter(Remittance.is_deleted.is_(False))

            if client_id is not None:
                query = query.filter(Remittance.client_id == client_id)

            if state:
                # rows written before the state rename still carry the old names
                legacy = [old for old, new in LEGACY_STATE_MAPPING.items() if new == state]
                query = query.filter(Remittance.state.in_([state, *legacy]))

            if date_from:
                query = query.filter(Remittance.date >= date_from)
            if date_to:
                query = query.filter(Remittance.date <= date_to)

            if search:
                pattern = "%{}%".format(search.strip())
                query = query.filter(
                    or_(
                        Remittance.remittance_number.ilike(pattern),
                        Remittance.bank_transaction_id.ilike(pattern),
                    )
                )

            total = query.count()
            remittances = (
                query.order_by(Remittance.date.desc(), Remittance.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Remittances fetched successfully",
                data={
                    "remittances": [serialize_remittance(r) for r in remittances],
                    "pagination": {
                        "page": page,
                        "limit": limit,
                        "total": total,
                        "pages": (total + limit - 1) // limit,
                    },
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error listing remittances: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the remittances.",
            )

    @staticmethod
    def get_remittance(remittance_number: str, client_id: Optional[int] = None):
        try:
            db = get_db_session()
            remittance = Remittance.get_by_remittance_number(
                remittance_number, client_id=client_id, db=db
            )
            if remittance is None:
                return _not_found()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Remittance fetched successfully",
                data=serialize_remittance(remittance, include_orders=True),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching remittance: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the remittance.",
            )
