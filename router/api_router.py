from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# utils
from utils.permissions import get_current_user

# routers
from modules.serviceability import serviceability_router
from modules.rate_card import rate_card_router
from modules.remittance import remittance_router
from modules.weight_discrepancy import weight_discrepancy_router


# create a comming master router for all the routes in the service
CommonRouter = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(build_request_context), Depends(get_current_user)],
)


# add all the routes to the master router
CommonRouter.include_router(serviceability_router)
CommonRouter.include_router(rate_card_router)
CommonRouter.include_router(remittance_router)
CommonRouter.include_router(weight_discrepancy_router)
