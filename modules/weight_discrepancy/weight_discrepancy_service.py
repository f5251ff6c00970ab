import http
from decimal import Decimal
from typing import Optional
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.weight_discrepancy.weight_discrepancy_schema import (
    WeightDiscrepancyInsertModel,
    WeightDiscrepancyResponseModel,
)

# models
from models import Carrier, Client, Order, Rate_Card, Weight_Discrepancy
from models.weight_discrepancy import (
    Dispute_Status,
    ACTION_DISPUTE_ACCEPTED,
    ACTION_DISPUTE_REJECTED,
)
from database.db import time_now

# utils
from modules.rate_card.slab_calculator import RateCardError, calculate_charges
from modules.serviceability.serviceability_service import ServiceabilityService


class WeightDiscrepancyService:

    @staticmethod
    def resolve_rate_card(order: Order, user_category: str, db):
        """
        Rate card of the carrier that shipped the order, falling back to any
        active carrier of the same group, e.g. "delhivery-air" -> DELHIVERY_AIR.
        """
        courier = (order.courier_partner or "").strip().upper()
        carrier_code = courier.replace("-", "_").replace(" ", "_")

        carrier = Carrier.find_by_code(carrier_code, db=db) if carrier_code else None
        if carrier is not None:
            rate_card = Rate_Card.find_by_carrier_and_category(
                carrier.id, user_category, db=db
            )
            if rate_card is not None:
                return carrier, rate_card

        carrier_group = carrier_code.split("_")[0]
        for carrier in Carrier.find_active(db=db):
            if carrier_group and carrier.carrier_group != carrier_group:
                continue
            rate_card = Rate_Card.find_by_carrier_and_category(
                carrier.id, user_category, db=db
            )
            if rate_card is not None:
                return carrier, rate_card

        return None, None

    @staticmethod
    def create_discrepancy(discrepancy_data: WeightDiscrepancyInsertModel):
        db = get_db_session()

        try:
            order = (
                db.query(Order)
                .filter(
                    Order.awb_number == discrepancy_data.awb_number,
                    Order.is_deleted.is_(False),
                )
                .first()
            )
            if order is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Order not found for AWB {}".format(discrepancy_data.awb_number),
                )

            declared_weight = Decimal(str(order.weight))
            charged_weight = Decimal(str(discrepancy_data.charged_weight))
            difference = charged_weight - declared_weight

            if difference <= 0:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Charged weight must be greater than the declared weight",
                )

            client = db.query(Client).filter(Client.id == order.client_id).first()
            carrier, rate_card = WeightDiscrepancyService.resolve_rate_card(
                order, client.user_category, db
            )
            if rate_card is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="No rate card found for category {}".format(
                        client.user_category
                    ),
                )

            zone = order.zone or ServiceabilityService.get_zone(
                order.pickup_pincode, order.delivery_pincode, db=db
            )

            charged = calculate_charges(rate_card, carrier, zone, charged_weight)
            declared = calculate_charges(rate_card, carrier, zone, declared_weight)

            discrepancy = Weight_Discrepancy(
                awb_number=order.awb_number,
                client_id=order.client_id,
                order_id=order.id,
                declared_weight=declared_weight,
                charged_weight=charged_weight,
                weight_discrepancy=difference,
                deduction_amount=charged.freight - declared.freight,
                awb_status=discrepancy_data.awb_status or order.status,
                dispute_status=Dispute_Status.new.value,
                discrepancy_date=time_now(),
            )
            db.add(discrepancy)
            db.commit()

            logger.info(
                extra=context_user_data.get(),
                msg="Weight discrepancy recorded for {}: +{} kg, deduction {}".format(
                    order.awb_number, difference, discrepancy.deduction_amount
                ),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Weight discrepancy created successfully",
                data=WeightDiscrepancyResponseModel.model_validate(discrepancy),
            )

        except RateCardError as e:
            db.rollback()
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message=str(e),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error creating weight discrepancy: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while creating the weight discrepancy.",
            )

    @staticmethod
    def get_summary(client_id: int, db):
        """Totals over every discrepancy of the client, ignoring list filters."""
        row = (
            db.query(
                func.count(Weight_Discrepancy.id),
                func.coalesce(func.sum(Weight_Discrepancy.weight_discrepancy), 0),
                func.coalesce(func.sum(Weight_Discrepancy.deduction_amount), 0),
                func.coalesce(
                    func.sum(
                        case(
                            (Weight_Discrepancy.action_taken == ACTION_DISPUTE_ACCEPTED, 1),
                            else_=0,
                        )
                    ),
                    0,
                ),
                func.coalesce(
                    func.sum(
                        case(
                            (Weight_Discrepancy.action_taken == ACTION_DISPUTE_REJECTED, 1),
                            else_=0,
                        )
                    ),
                    0,
                ),
            )
            .filter(
                Weight_Discrepancy.client_id == client_id,
                Weight_Discrepancy.is_deleted.is_(False),
            )
            .one()
        )

        return {
            "total_discrepancies": row[0],
            "total_weight_discrepancy": round(float(row[1]), 3),
            "total_deduction": round(float(row[2]), 2),
            "disputes_accepted": int(row[3]),
            "disputes_rejected": int(row[4]),
        }

    @staticmethod
    def list_discrepancies(
        client_id: int,
        page: int = 1,
        limit: int = 25,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ):
        try:
            db = get_db_session()

            query = db.query(Weight_Discrepancy).filter(
                Weight_Discrepancy.client_id == client_id,
                Weight_Discrepancy.is_deleted.is_(False),
            )

            if search:
                query = query.filter(
                    Weight_Discrepancy.awb_number.ilike("%{}%".format(search.strip()))
                )

            if status and status != "all":
                query = query.filter(Weight_Discrepancy.awb_status == status)

            total = query.count()
            discrepancies = (
                query.order_by(
                    Weight_Discrepancy.discrepancy_date.desc(), Weight_Discrepancy.id.desc()
                )
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Weight discrepancies fetched successfully",
                data={
                    "discrepancies": [
                        WeightDiscrepancyResponseModel.model_validate(d)
                        for d in discrepancies
                    ],
                    "pagination": {
                        "page": page,
                        "limit": limit,
                        "total": total,
                        "pages": (total + limit - 1) // limit,
                    },
                    "summary": WeightDiscrepancyService.get_summary(client_id, db),
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error listing weight discrepancies: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the weight discrepancies.",
            )

    @staticmethod
    def raise_dispute(discrepancy_uuid, client_id: int):
        db = get_db_session()

        try:
            discrepancy = (
                db.query(Weight_Discrepancy)
                .filter(
                    Weight_Discrepancy.uuid == discrepancy_uuid,
                    Weight_Discrepancy.client_id == client_id,
                    Weight_Discrepancy.is_deleted.is_(False),
                )
                .first()
            )
            if discrepancy is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Weight discrepancy not found",
                )

            if discrepancy.dispute_status != Dispute_Status.new.value:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Dispute has already been raised",
                )

            discrepancy.dispute_status = Dispute_Status.dispute.value
            discrepancy.dispute_raised_at = time_now()
            db.add(discrepancy)
            db.commit()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Dispute raised successfully",
                data=WeightDiscrepancyResponseModel.model_validate(discrepancy),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error raising dispute: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Error raising dispute",
            )

    @staticmethod
    def resolve_dispute(discrepancy_uuid, accepted: bool, actor: str = "admin"):
        db = get_db_session()

        try:
            discrepancy = Weight_Discrepancy.get_by_uuid(discrepancy_uuid)
            if discrepancy is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Weight discrepancy not found",
                )

            if discrepancy.dispute_status == Dispute_Status.closed.value:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Dispute is already closed",
                )

            discrepancy.action_taken = (
                ACTION_DISPUTE_ACCEPTED if accepted else ACTION_DISPUTE_REJECTED
            )
            discrepancy.dispute_status = Dispute_Status.closed.value
            db.add(discrepancy)
            db.commit()

            logger.info(
                extra=context_user_data.get(),
                msg="Dispute on {} closed by {}: {}".format(
                    discrepancy.awb_number, actor, discrepancy.action_taken
                ),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Dispute resolved successfully",
                data=WeightDiscrepancyResponseModel.model_validate(discrepancy),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg="Error resolving dispute: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Error resolving dispute",
            )
