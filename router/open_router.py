from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# routers
from shipping_partner.delhivery.delhivery_controller import delhivery_router

from modules.shipment.shipment_controller import track_router


# carrier webhooks and public tracking, no user token
OpenRouter = APIRouter(prefix="/api/v1", dependencies=[Depends(build_request_context)])


# add all the routes to the master router
OpenRouter.include_router(track_router)

OpenRouter.include_router(delhivery_router)
