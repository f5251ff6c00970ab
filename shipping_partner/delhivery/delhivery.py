import http
import os

import requests
from dotenv import load_dotenv

from context_manager.context import context_user_data

from logger import logger

# schema
from schema.base import GenericResponseModel

# utils
from utils.datetime import parse_carrier_datetime

load_dotenv()


class Delhivery:

    # API URL'S
    track_order_url = os.environ.get(
        "DELHIVERY_TRACK_URL", "https://track.delhivery.com/api/v1/packages/json/"
    )

    Token = os.environ.get("DELHIVERY_TOKEN", "")
    AirToken = os.environ.get("DELHIVERY_AIR_TOKEN", "")

    timeout = 15

    @staticmethod
    def date_formatter(timestamp):
        """StatusDateTime (IST, with or without fractional seconds) to aware UTC."""
        return parse_carrier_datetime(timestamp)

    @staticmethod
    def get_token(courier=None):
        if courier == "delhivery-air" and Delhivery.AirToken:
            return Delhivery.AirToken
        return Delhivery.Token

    @staticmethod
    def fetch_tracking(awb_number: str, courier=None):
        """
        Pull the latest shipment state for one waybill.
        data holds the Shipment dict on success.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": "Token " + Delhivery.get_token(courier),
        }

        try:
            response = requests.get(
                Delhivery.track_order_url,
                params={"waybill": awb_number, "ref_ids": ""},
                headers=headers,
                timeout=Delhivery.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.RequestException as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Delhivery tracking request failed for {}: {}".format(
                    awb_number, str(e)
                ),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_GATEWAY,
                message="Some error occurred while tracking, please try again",
            )

        try:
            response_data = response.json()
        except ValueError as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Delhivery Failed to parse JSON response: {}".format(str(e)),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_GATEWAY,
                message="Some error occurred while tracking, please try again",
            )

        if "Error" in response_data:
            logger.error(
                extra=context_user_data.get(),
                msg="Delhivery tracking error for {}: {}".format(
                    awb_number, response_data["Error"]
                ),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message=str(response_data["Error"]),
            )

        tracking_data = response_data.get("ShipmentData") or []
        shipment = tracking_data[0].get("Shipment") if tracking_data else None

        if not shipment:
            return GenericResponseModel(
                status_code=http.HTTPStatus.NOT_FOUND,
                message="No tracking data found for {}".format(awb_number),
            )

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=shipment,
            message="Tracking successfull",
        )
