from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from schema.base import GenericResponseModel
from shipping_partner.delhivery.delhivery import Delhivery
from modules.shipment.reconciliation_service import ReconciliationService
from modules.shipment.shipment_service import ShipmentService
from scripts.fix_missed_statuses import format_summary, main


def tracked(status, status_type, status_code="", instructions=""):
    return GenericResponseModel(
        status_code=200,
        status=True,
        data={
            "AWB": "ignored",
            "Status": {
                "Status": status,
                "StatusType": status_type,
                "StatusCode": status_code,
                "StatusDateTime": "2026-03-10T10:15:00",
                "StatusLocation": "Pune_Hub (Maharashtra)",
                "Instructions": instructions,
            },
        },
    )


NOT_FOUND = GenericResponseModel(status_code=404, message="No tracking data found")


@pytest.fixture
def orders(client_factory, order_factory):
    client = client_factory()
    return {
        "delivered": order_factory(client, awb_number="AWB-DL", status="in_transit"),
        "ndr": order_factory(client, awb_number="AWB-NDR", status="out_for_delivery"),
        "rto": order_factory(client, awb_number="AWB-RTO", status="in_transit"),
        "correct": order_factory(client, awb_number="AWB-OK", status="in_transit"),
        "untracked": order_factory(client, awb_number="AWB-404", status="ready_to_ship"),
        "unknown": order_factory(client, awb_number="AWB-UNK", status="pickups_manifests"),
        # never re-tracked
        "final": order_factory(client, awb_number="AWB-FINAL", status="delivered"),
        "no_awb": order_factory(client, awb_number=None, status="in_transit"),
    }


TRACKING = {
    "AWB-DL": tracked("Delivered", "DL", "EOD-38", "Delivered to consignee"),
    "AWB-NDR": tracked("Pending", "UD", "EOD-74", "Consignee refused"),
    "AWB-RTO": tracked("In Transit", "RT", "RT-101", "Returned as per client instructions"),
    "AWB-OK": tracked("In Transit", "UD", "X-DLL2F"),
    "AWB-404": NOT_FOUND,
    "AWB-UNK": tracked("Something new", None),
}


def fake_tracking(awb_number, courier=None):
    return TRACKING[awb_number]


@pytest.fixture
def tracking():
    with patch.object(Delhivery, "fetch_tracking", side_effect=fake_tracking) as mock:
        yield mock


def test_candidates_skip_final_and_unshipped_orders(db, orders):
    awbs = [order.awb_number for order in ReconciliationService.find_candidates(db)]

    assert awbs == ["AWB-DL", "AWB-NDR", "AWB-RTO", "AWB-OK", "AWB-404", "AWB-UNK"]


def test_dry_run_reports_without_writing(db, orders, tracking):
    summary = ReconciliationService.fix_missed_statuses(dry_run=True, delay=0, db=db)

    assert summary["dry_run"] is True
    assert summary["total"] == 6
    assert summary["delivered_fixed"] == 1
    assert summary["ndr_fixed"] == 1
    assert summary["rto_fixed"] == 1
    assert summary["already_correct"] == 1
    assert summary["skipped"] == 2
    assert summary["errors"] == 0

    assert orders["delivered"].status == "in_transit"
    assert orders["ndr"].status == "out_for_delivery"
    assert [fixed["awb"] for fixed in summary["fixed_orders"]] == ["AWB-DL", "AWB-NDR", "AWB-RTO"]


def test_statuses_are_applied(db, orders, tracking):
    summary = ReconciliationService.fix_missed_statuses(delay=0, db=db)

    db.expire_all()
    delivered = orders["delivered"]
    db.refresh(delivered)
    assert delivered.status == "delivered"
    assert delivered.delivered_date is not None
    assert delivered.status_history[-1]["remarks"] == "Auto-sync fix - EOD-38: Delivered to consignee"

    ndr = orders["ndr"]
    db.refresh(ndr)
    assert ndr.status == "ndr"
    assert ndr.ndr_info["ndr_attempts"] == 1
    assert ndr.ndr_info["ndr_reason"] == "Consignee refused"
    assert ndr.ndr_info["nsl_code"] == "EOD-74"

    rto = orders["rto"]
    db.refresh(rto)
    assert rto.status == "rto_in_transit"

    assert summary["fixed_orders"][1] == {
        "order_id": ndr.order_id,
        "awb": "AWB-NDR",
        "old_status": "out_for_delivery",
        "new_status": "ndr",
        "status_code": "EOD-74",
        "reason": "Consignee refused",
    }


def test_database_errors_are_counted(db, orders, tracking):
    with patch.object(
        ShipmentService, "apply_status_update", side_effect=SQLAlchemyError("db gone")
    ):
        summary = ReconciliationService.fix_missed_statuses(delay=0, db=db)

    assert summary["errors"] == 3
    assert summary["fixed_orders"] == []


def test_waits_between_orders(db, orders, tracking):
    with patch("modules.shipment.reconciliation_service.time.sleep") as sleep:
        ReconciliationService.fix_missed_statuses(dry_run=True, delay=0.3, db=db)

    assert sleep.call_count == 5
    sleep.assert_called_with(0.3)


def test_format_summary():
    output = format_summary(
        {
            "dry_run": True,
            "total": 2,
            "ndr_fixed": 1,
            "delivered_fixed": 0,
            "rto_fixed": 0,
            "already_correct": 1,
            "skipped": 0,
            "errors": 0,
            "fixed_orders": [
                {
                    "order_id": "ORD-1",
                    "awb": "AWB-1",
                    "old_status": "in_transit",
                    "new_status": "ndr",
                    "status_code": "EOD-6",
                    "reason": "Consignee unavailable",
                }
            ],
        }
    )

    assert "DRY RUN SUMMARY" in output
    assert "NDR fixed:          1" in output
    assert "Would fix orders:" in output
    assert "1. ORD-1 (AWB: AWB-1) in_transit -> ndr (EOD-6: Consignee unavailable)" in output


def test_cli_dry_run(db, orders, tracking, capsys):
    exit_code = main(["--dry-run", "--delay", "0"])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "DRY RUN SUMMARY" in output
    assert "Total checked:      6" in output


def test_third_ndr_still_gets_a_next_attempt(db, client_factory, order_factory, tracking):
    order = order_factory(
        client_factory(),
        awb_number="AWB-NDR",
        status="out_for_delivery",
        ndr_info={"is_ndr": False, "ndr_attempts": 2},
    )

    ReconciliationService.fix_missed_statuses(delay=0, db=db)

    db.expire_all()
    db.refresh(order)
    assert order.ndr_info["ndr_attempts"] == 3
    # 10:15 IST is 04:45 UTC, plus a day
    assert order.ndr_info["next_attempt_date"].startswith("2026-03-11T04:45:00")
