import http
from sqlalchemy.exc import SQLAlchemyError


from context_manager.context import context_user_data, get_db_session

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.serviceability.serviceability_schema import (
    RateCalculatorParamsModel,
    RateCalculatorResponseModel,
)

# models
from models import Carrier, Client, Pincode_Mapping, Rate_Card

# utils
from modules.rate_card.slab_calculator import RateCardError, calculate_charges
from utils.weight_calc import chargeable_weight, volumetric_weight

# data
from data.locations import metro_cities, special_zone, island_zone


DEFAULT_USER_CATEGORY = "New User"


class ServiceabilityService:

    @staticmethod
    def calculate_zone(source_pincode_record, destination_pincode_record):
        """
        Zone between two pincode records:
        A same city, B same state, F island, E special zone, C metro to metro, else D.
        """
        if not source_pincode_record or not destination_pincode_record:
            return "D"

        source_city = source_pincode_record.city.lower()
        destination_city = destination_pincode_record.city.lower()
        source_state = source_pincode_record.state.lower()
        destination_state = destination_pincode_record.state.lower()

        # For A Zone -> Same city
        if source_city == destination_city:
            return "A"

        # For B Zone -> Same state
        if source_state == destination_state:
            return "B"

        # For F Zone -> Islands
        if source_state in island_zone or destination_state in island_zone:
            return "F"

        # For E Zone -> Special Zones
        if source_state in special_zone or destination_state in special_zone:
            return "E"

        # For C Zone -> Metro to Metro
        if source_city in metro_cities and destination_city in metro_cities:
            return "C"

        return "D"

    @staticmethod
    def get_zone(pickup_pincode, delivery_pincode, db=None):
        db = db or get_db_session()

        try:
            pincodes = [int(pickup_pincode), int(delivery_pincode)]
        except (TypeError, ValueError):
            return "D"

        records = {
            record.pincode: record
            for record in db.query(Pincode_Mapping)
            .filter(Pincode_Mapping.pincode.in_(pincodes))
            .all()
        }

        return ServiceabilityService.calculate_zone(
            records.get(pincodes[0]), records.get(pincodes[1])
        )

    @staticmethod
    def _resolve_user_category(params: RateCalculatorParamsModel, db):
        user_data = context_user_data.get()
        client_id = getattr(user_data, "client_id", None)

        if client_id:
            client = db.query(Client).filter(Client.id == client_id).first()
            if client is not None:
                return client.user_category

        return params.user_category or DEFAULT_USER_CATEGORY

    @staticmethod
    def calculate_rate(rate_calculator_params: RateCalculatorParamsModel):
        try:
            db = get_db_session()

            user_category = ServiceabilityService._resolve_user_category(
                rate_calculator_params, db
            )
            zone = ServiceabilityService.get_zone(
                rate_calculator_params.pickup_pincode,
                rate_calculator_params.delivery_pincode,
                db=db,
            )

            volumetric = volumetric_weight(
                rate_calculator_params.length,
                rate_calculator_params.breadth,
                rate_calculator_params.height,
            )
            weight = chargeable_weight(
                rate_calculator_params.weight,
                rate_calculator_params.length,
                rate_calculator_params.breadth,
                rate_calculator_params.height,
            )

            rates = []
            for carrier in Carrier.find_active(db=db):
                rate_card = Rate_Card.find_by_carrier_and_category(
                    carrier.id, user_category, db=db
                )
                if rate_card is None:
                    continue

                try:
                    breakdown = calculate_charges(
                        rate_card,
                        carrier,
                        zone,
                        weight,
                        payment_mode=rate_calculator_params.payment_mode,
                        cod_amount=rate_calculator_params.cod_amount,
                        shipment_type=rate_calculator_params.shipment_type,
                    )
                except RateCardError as e:
                    # one broken card should not hide the other carriers
                    logger.error(
                        extra=context_user_data.get(),
                        msg="Rate card {} for {} is invalid: {}".format(
                            rate_card.id, carrier.carrier_code, str(e)
                        ),
                    )
                    continue

                rates.append(
                    RateCalculatorResponseModel(
                        carrier_code=carrier.carrier_code,
                        carrier_name=carrier.display_name,
                        service_type=carrier.service_type,
                        logo=carrier.logo_url,
                        zone=breakdown.zone,
                        rate_card_version=rate_card.version,
                        freight=float(breakdown.freight),
                        cod_charges=float(breakdown.cod_charges),
                        gst_amount=float(breakdown.gst_amount),
                        total=float(breakdown.total),
                        chargeable_weight=float(weight),
                        volumetric_weight=float(volumetric),
                    )
                )

            if not rates:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="No rate card found for category {}".format(user_category),
                )

            rates.sort(key=lambda rate: rate.total)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Rates calculated successfully",
                data=rates,
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Error calculating rates: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="An error occurred while calculating the rate.",
            )
