from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import requests

from shipping_partner.delhivery.delhivery import Delhivery


def tracking_response(payload=None, status_code=200, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error"
        )
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


SHIPMENT = {
    "AWB": "1490000001",
    "Status": {
        "Status": "Delivered",
        "StatusType": "DL",
        "StatusDateTime": "2026-03-10T10:15:00",
        "StatusCode": "EOD-38",
        "Instructions": "Delivered to consignee",
    },
}


def test_returns_the_shipment():
    with patch("requests.get", return_value=tracking_response({"ShipmentData": [{"Shipment": SHIPMENT}]})) as get:
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status is True
    assert response.data == SHIPMENT

    _, kwargs = get.call_args
    assert kwargs["params"]["waybill"] == "1490000001"
    assert kwargs["headers"]["Authorization"].startswith("Token ")
    assert kwargs["timeout"] == Delhivery.timeout


def test_air_shipments_use_the_air_token():
    with patch.object(Delhivery, "Token", "surface"), patch.object(Delhivery, "AirToken", "air"):
        assert Delhivery.get_token("delhivery-air") == "air"
        assert Delhivery.get_token("delhivery") == "surface"


def test_network_error():
    with patch("requests.get", side_effect=requests.exceptions.ConnectionError("boom")):
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status is False
    assert response.status_code == 502


def test_http_error():
    with patch("requests.get", return_value=tracking_response(status_code=503)):
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status_code == 502


def test_invalid_json():
    with patch("requests.get", return_value=tracking_response(json_error=True)):
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status_code == 502


def test_carrier_error_message():
    with patch("requests.get", return_value=tracking_response({"Error": "Invalid token"})):
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status_code == 400
    assert response.message == "Invalid token"


def test_unknown_waybill():
    with patch("requests.get", return_value=tracking_response({"ShipmentData": []})):
        response = Delhivery.fetch_tracking("1490000001")

    assert response.status_code == 404


def test_date_formatter_reads_ist_timestamps():
    expected = datetime(2026, 3, 10, 4, 45, tzinfo=timezone.utc)

    assert Delhivery.date_formatter("2026-03-10T10:15:00") == expected
    assert Delhivery.date_formatter("2026-03-10T10:15:00.123") == expected.replace(microsecond=123000)
    assert Delhivery.date_formatter("") is None
    assert Delhivery.date_formatter("yesterday") is None
