from unittest.mock import patch

import pytest

from models import Shipment_Tracking_Event
from modules.shipment.celery_tasks import process_scan_push
from tests.helpers import PNG_DATA_URL, WEBHOOK_HEADERS, scan_push


SCAN_URL = "/api/v1/webhooks/delhivery/scan-status"


@pytest.fixture
def order(client_factory, order_factory):
    return order_factory(client_factory(), status="out_for_delivery")


class TestScanStatusWebhook:
    def test_token_is_required(self, api, order):
        response = api.post(SCAN_URL, json=scan_push(order.awb_number, "Delivered", "DL"))

        assert response.status_code == 401

    def test_wrong_token_is_rejected(self, api, order):
        response = api.post(
            SCAN_URL,
            json=scan_push(order.awb_number, "Delivered", "DL"),
            headers={"X-Webhook-Token": "guess"},
        )

        assert response.status_code == 401

    def test_scan_is_processed(self, db, api, order):
        response = api.post(
            SCAN_URL,
            json=scan_push(order.awb_number, "Delivered", "DL"),
            headers=WEBHOOK_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["status"] is True
        assert response.json()["data"]["request_id"]

        db.expire_all()
        db.refresh(order)
        assert order.status == "delivered"
        assert db.query(Shipment_Tracking_Event).count() == 1

    def test_payload_without_shipment_is_invalid(self, api):
        response = api.post(SCAN_URL, json={"waybill": "123"}, headers=WEBHOOK_HEADERS)

        assert response.status_code == 422

    def test_queue_failure_is_still_acknowledged(self, api, order):
        with patch("shipping_partner.delhivery.delhivery_controller.process_scan_push") as task:
            task.apply_async.side_effect = ConnectionError("redis down")
            response = api.post(
                SCAN_URL,
                json=scan_push(order.awb_number, "Delivered", "DL"),
                headers=WEBHOOK_HEADERS,
            )

        assert response.status_code == 200
        task.apply_async.assert_called_once()


class TestScanPushTask:
    def test_task_updates_the_order(self, db, order):
        result = process_scan_push(scan_push(order.awb_number, "Delivered", "DL"))

        assert result["order_updated"] is True
        db.expire_all()
        db.refresh(order)
        assert order.status == "delivered"

    def test_malformed_payload_is_dropped(self, db):
        result = process_scan_push({"Shipment": {}})

        assert result["success"] is False
        assert "AWB" in result["error"]


class TestDocumentWebhooks:
    UPLOAD = "modules.shipment.shipment_service.upload_bytes_to_s3"
    UPLOADED = {
        "success": True,
        "url": "https://test-bucket.s3.amazonaws.com/epod/x/1.png",
        "s3_key": "epod/x/1.png",
        "file_size": 18,
    }

    def test_epod(self, db, api, order):
        with patch(self.UPLOAD, return_value=self.UPLOADED):
            response = api.post(
                "/api/v1/webhooks/delhivery/epod",
                json={"waybill": order.awb_number, "EPOD": PNG_DATA_URL, "orderID": order.order_id},
                headers=WEBHOOK_HEADERS,
            )

        assert response.status_code == 200
        db.expire_all()
        db.refresh(order)
        assert order.epod_url == self.UPLOADED["url"]

    def test_sorter_image(self, db, api, order):
        with patch(self.UPLOAD, return_value=self.UPLOADED):
            response = api.post(
                "/api/v1/webhooks/delhivery/sorter-image",
                json={"Waybill": order.awb_number, "Weight_images": PNG_DATA_URL},
                headers=WEBHOOK_HEADERS,
            )

        assert response.status_code == 200
        db.expire_all()
        db.refresh(order)
        assert order.weight_photo_url == self.UPLOADED["url"]

    def test_qc_image_without_image(self, api):
        response = api.post(
            "/api/v1/webhooks/delhivery/qc-image",
            json={"waybillId": "RVP-1", "returnId": "RET-1"},
            headers=WEBHOOK_HEADERS,
        )

        assert response.status_code == 400

    def test_document_webhooks_need_the_token(self, api):
        response = api.post(
            "/api/v1/webhooks/delhivery/epod",
            json={"waybill": "AWB", "EPOD": PNG_DATA_URL},
        )

        assert response.status_code == 401


class TestTrackingRoute:
    def test_tracking(self, db, api, order):
        api.post(
            SCAN_URL,
            json=scan_push(order.awb_number, "Delivered", "DL"),
            headers=WEBHOOK_HEADERS,
        )

        response = api.get(f"/api/v1/shipment/track/{order.awb_number}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "delivered"
        assert data["courier_status"] == "Delivered"
        assert [event["status"] for event in data["events"]] == ["Delivered"]
        assert data["status_history"][-1]["status"] == "delivered"

    def test_unknown_awb(self, api):
        response = api.get("/api/v1/shipment/track/NOPE")

        assert response.status_code == 404
