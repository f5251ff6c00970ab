import pytest

from shipping_partner.delhivery.status_mapping import (
    is_ndr_code,
    is_terminal,
    map_delhivery_status,
)


@pytest.mark.parametrize(
    "status, status_type, expected",
    [
        ("Delivered", "DL", "delivered"),
        ("RTO", "DL", "rto_delivered"),
        ("RTO Delivered", "DL", "rto_delivered"),
        ("DTO", "DL", "delivered"),
        ("Open", "PP", "pickups_manifests"),
        ("Scheduled", "PP", "pickups_manifests"),
        ("Dispatched", "PP", "out_for_delivery"),
        ("Picked Up", "PP", "pickups_manifests"),
        ("In Transit", "PU", "in_transit"),
        ("Dispatched", "PU", "out_for_delivery"),
        ("In Transit", "RT", "rto_in_transit"),
        ("Pending", "RT", "rto_in_transit"),
        ("Canceled", "CN", "cancelled"),
        ("Closed", "CN", "cancelled"),
    ],
)
def test_status_type_rules(status, status_type, expected):
    assert map_delhivery_status(status, status_type) == expected


@pytest.mark.parametrize(
    "status, expected",
    [
        ("Manifested", "pickups_manifests"),
        ("Not Picked", "pickups_manifests"),
        ("In Transit", "in_transit"),
        ("Reached Destination City", "in_transit"),
        ("Dispatched", "out_for_delivery"),
        ("Out for Delivery", "out_for_delivery"),
        ("Undelivered", "ndr"),
        ("Customer Refused", "ndr"),
        ("RTO Initiated", "rto_in_transit"),
        ("Lost", "lost"),
        ("Damaged", "lost"),
    ],
)
def test_status_text_rules(status, expected):
    assert map_delhivery_status(status) == expected


def test_status_type_and_text_are_case_insensitive():
    assert map_delhivery_status("  delivered ", "dl") == "delivered"
    assert map_delhivery_status("OUT FOR DELIVERY") == "out_for_delivery"


def test_ndr_status_code_wins_over_status_text():
    assert map_delhivery_status("Pending", "UD", "EOD-74") == "ndr"
    assert map_delhivery_status("In Transit", None, "eod-6") == "ndr"


def test_status_type_wins_over_ndr_code():
    assert map_delhivery_status("Delivered", "DL", "EOD-74") == "delivered"


def test_unknown_forward_status_falls_back_to_in_transit():
    assert map_delhivery_status("Bagged at hub", "UD") == "in_transit"


def test_unknown_status_defaults_to_in_transit():
    assert map_delhivery_status("Something new") == "in_transit"


def test_unknown_status_is_none_when_strict():
    assert map_delhivery_status("Something new", strict=True) is None
    assert map_delhivery_status(None, None, None, strict=True) is None


def test_known_status_is_mapped_when_strict():
    assert map_delhivery_status("Delivered", "DL", strict=True) == "delivered"


def test_is_ndr_code():
    assert is_ndr_code("EOD-11")
    assert is_ndr_code(" st-108 ")
    assert not is_ndr_code("X-DDD3FD")
    assert not is_ndr_code(None)


def test_is_terminal():
    assert is_terminal("delivered")
    assert is_terminal("rto_delivered")
    assert is_terminal("cancelled")
    assert not is_terminal("rto_in_transit")
    assert not is_terminal("ndr")
