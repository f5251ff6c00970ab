import http
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.rate_card.rate_card_schema import (
    RateCardInsertModel,
    RateCardResponseModel,
)

# models
from models import Carrier, Client, Rate_Card
from models.rate_card import normalize_category

# utils
from .slab_calculator import RateCardError, validate_rate_card_payload


class RateCardService:

    @staticmethod
    def get_current_rate_cards(carrier_id: int):
        try:
            db = get_db_session()

            carrier = db.query(Carrier).filter(Carrier.id == carrier_id).first()
            if carrier is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Carrier not found",
                )

            rate_cards = Rate_Card.find_current_by_carrier(carrier_id, db=db)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Rate cards fetched successfully",
                data={
                    "carrier": {
                        "id": carrier.id,
                        "carrier_code": carrier.carrier_code,
                        "display_name": carrier.display_name,
                        "zone_labels": carrier.zone_labels,
                        "weight_slab_labels": carrier.weight_slab_labels,
                    },
                    "rate_cards": [
                        RateCardResponseModel.model_validate(rate_card)
                        for rate_card in rate_cards
                    ],
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching rate cards: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the rate cards.",
            )

    @staticmethod
    def get_rate_history(carrier_id: int, user_category: str):
        try:
            db = get_db_session()
            history = Rate_Card.find_rate_history(carrier_id, user_category, db=db)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Rate history fetched successfully",
                data=[RateCardResponseModel.model_validate(card) for card in history],
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching rate history: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the rate history.",
            )

    @staticmethod
    def create_new_version(
        carrier_id: int, rate_card_data: RateCardInsertModel, updated_by: str = None
    ):
        """
        Publish a new version of a carrier's rate card for one category.
        The first card for a category starts at version 1.
        """
        db = get_db_session()

        try:
            carrier = db.query(Carrier).filter(Carrier.id == carrier_id).first()
            if carrier is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Carrier not found",
                )

            payload = rate_card_data.model_dump()
            validate_rate_card_payload(
                payload,
                zone_labels=carrier.zone_labels,
                slab_type=carrier.weight_slab_type,
            )

            user_category = normalize_category(payload.pop("user_category"))

            current = Rate_Card.find_by_carrier_and_category(
                carrier_id, user_category, db=db
            )

            if current is not None:
                new_rate_card = current.create_new_version(
                    payload, updated_by=updated_by, db=db
                )
            else:
                new_rate_card = Rate_Card(
                    user_category=user_category,
                    carrier_id=carrier_id,
                    version=1,
                    is_current=True,
                    updated_by=updated_by,
                    **payload,
                )
                db.add(new_rate_card)

            db.commit()

            logger.info(
                extra=context_user_data.get(),
                msg="Rate card v{} published for {} / {}".format(
                    new_rate_card.version, carrier.carrier_code, user_category
                ),
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Rate card version created successfully",
                data=RateCardResponseModel.model_validate(new_rate_card),
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
                msg="Error creating rate card version: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while creating the rate card version.",
            )

    @staticmethod
    def get_client_rate_cards():
        """Current cards of every active carrier for the caller's category."""
        try:
            db = get_db_session()
            user_data = context_user_data.get()

            client = Client.get_by_id(user_data.client_id) if user_data.client_id else None
            if client is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Client not found",
                )

            rate_cards = []
            for carrier in Carrier.find_active(db=db):
                rate_card = Rate_Card.find_by_carrier_and_category(
                    carrier.id, client.user_category, db=db
                )
                if rate_card is None:
                    continue

                rate_cards.append(
                    {
                        "carrier_code": carrier.carrier_code,
                        "carrier_name": carrier.display_name,
                        "zone_labels": carrier.zone_labels,
                        "rate_card": RateCardResponseModel.model_validate(rate_card),
                    }
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Rate card fetched successfully",
                data={"user_category": client.user_category, "carriers": rate_cards},
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error fetching client rate card: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while fetching the rate card.",
            )
