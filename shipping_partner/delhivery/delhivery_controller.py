import hmac
import http
import os
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from typing import Optional

from context_manager.context import context_user_data, get_request_id

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.shipment.shipment_schema import (
    ScanPushModel,
    EpodWebhookModel,
    SorterImageWebhookModel,
    QcImageWebhookModel,
)

# utils
from utils.response_handler import build_api_response
from limiter import limiter, WEBHOOK_RATE_LIMIT

# service
from modules.shipment.shipment_service import ShipmentService
from modules.shipment.celery_tasks import process_scan_push

# creating a client router
delhivery_router = APIRouter(prefix="/webhooks/delhivery", tags=["delhivery"])


def verify_webhook_token(x_webhook_token: Optional[str] = Header(None)):
    expected = os.environ.get("DELHIVERY_WEBHOOK_TOKEN", "")

    if not expected or not x_webhook_token or not hmac.compare_digest(
        x_webhook_token.encode(), expected.encode()
    ):
        logger.warning(msg="Rejected Delhivery webhook with invalid token")
        raise HTTPException(
            status_code=http.HTTPStatus.UNAUTHORIZED,
            detail={"message": "Invalid webhook token", "status": False},
        )


@delhivery_router.post(
    "/scan-status",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(verify_webhook_token)],
)
@limiter.limit(WEBHOOK_RATE_LIMIT)
async def scan_status_webhook(request: Request, payload: ScanPushModel):
    request_id = get_request_id()
    body = payload.model_dump(exclude_none=True)

    try:
        process_scan_push.apply_async(args=[body], queue="webhooks")
        logger.info(
            extra=context_user_data.get(),
            msg="Scan push queued {} for {}".format(request_id, payload.Shipment.AWB),
        )

    except Exception as e:
        # still acknowledge, a non 200 makes Delhivery retry the whole batch
        logger.error(
            extra=context_user_data.get(),
            msg="Failed to queue scan push {}: {}".format(request_id, str(e)),
        )

    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            message="Webhook received",
            data={"request_id": request_id},
        )
    )


@delhivery_router.post(
    "/epod",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(verify_webhook_token)],
)
@limiter.limit(WEBHOOK_RATE_LIMIT)
async def epod_webhook(request: Request, payload: EpodWebhookModel):
    try:
        response: GenericResponseModel = ShipmentService.process_document(
            "epod", payload.waybill, payload.EPOD, order_id=payload.orderID
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while processing the EPOD.",
            )
        )


@delhivery_router.post(
    "/sorter-image",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(verify_webhook_token)],
)
@limiter.limit(WEBHOOK_RATE_LIMIT)
async def sorter_image_webhook(request: Request, payload: SorterImageWebhookModel):
    try:
        response: GenericResponseModel = ShipmentService.process_document(
            "sorter_image", payload.Waybill, payload.Weight_images
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while processing the sorter image.",
            )
        )


@delhivery_router.post(
    "/qc-image",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
    dependencies=[Depends(verify_webhook_token)],
)
@limiter.limit(WEBHOOK_RATE_LIMIT)
async def qc_image_webhook(request: Request, payload: QcImageWebhookModel):
    try:
        response: GenericResponseModel = ShipmentService.process_document(
            "qc_image", payload.waybillId, payload.Image, return_id=payload.returnId
        )
        return build_api_response(response)

    except Exception as e:
        return build_api_response(
            GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                data=str(e),
                message="An error occurred while processing the QC image.",
            )
        )
