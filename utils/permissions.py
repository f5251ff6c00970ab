"""
Staff permission dependencies.

Admins always pass. Staff members pass only when their token carries the
required permission flags. Anyone else is rejected.
"""

import http
from typing import List

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from logger import logger
from utils.jwt_token_handler import JWTHandler, UserDataModel

security = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_CLIENT = "client"

PERMISSION_NAMES = {
    "dashboard": "Dashboard Access",
    "clients": "Clients Management",
    "orders": "Orders Management",
    "tickets": "Tickets Management",
    "billing": "Billing Access",
    "remittances": "Remittances Management",
    "ndr": "NDR Management",
    "weight_discrepancies": "Weight Discrepancies",
    "wallet_recharge": "Wallet Recharge Access",
    "rate_cards": "Rate Cards Management",
    "carriers": "Carriers Management",
    "staff_management": "Staff Management",
    "can_recharge_wallet": "Wallet Recharge",
    "can_change_client_category": "Change Client Category",
    "can_generate_monthly_billing": "Generate Monthly Billing",
}


def format_permission_name(key: str) -> str:
    if key in PERMISSION_NAMES:
        return PERMISSION_NAMES[key]
    return " ".join(word.capitalize() for word in key.split("_"))


def _unauthorized(message="Unauthorized access. Authentication required."):
    return HTTPException(
        status_code=http.HTTPStatus.UNAUTHORIZED,
        detail={"message": message, "status": False},
    )


def _forbidden(message):
    return HTTPException(
        status_code=http.HTTPStatus.FORBIDDEN,
        detail={"message": message, "status": False},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserDataModel:
    if credentials is None:
        raise _unauthorized()

    user = JWTHandler.decode_access_token(credentials.credentials)

    if user.status != "active":
        raise _forbidden("Account is not active. Please contact support.")

    return user


def require_permission(permission_key: str):
    async def checker(user: UserDataModel = Depends(get_current_user)):
        if user.role == ROLE_ADMIN:
            return user

        if user.role == ROLE_STAFF:
            if user.permissions.get(permission_key) is True:
                return user

            logger.warning(
                msg="Staff permission denied: %s requires %s"
                % (user.email, permission_key)
            )
            raise _forbidden(
                "Access denied. You do not have permission for: "
                + format_permission_name(permission_key)
            )

        raise _unauthorized()

    return checker


def require_all_permissions(permission_keys: List[str]):
    async def checker(user: UserDataModel = Depends(get_current_user)):
        if user.role == ROLE_ADMIN:
            return user

        if user.role == ROLE_STAFF:
            missing = [key for key in permission_keys if not user.permissions.get(key)]
            if not missing:
                return user

            logger.warning(
                msg="Staff permissions denied: %s missing %s" % (user.email, missing)
            )
            raise _forbidden(
                "Access denied. Missing permissions: "
                + ", ".join(format_permission_name(key) for key in missing)
            )

        raise _unauthorized()

    return checker


def require_any_permission(permission_keys: List[str]):
    async def checker(user: UserDataModel = Depends(get_current_user)):
        if user.role == ROLE_ADMIN:
            return user

        if user.role == ROLE_STAFF:
            if any(user.permissions.get(key) is True for key in permission_keys):
                return user

            logger.warning(
                msg="Staff permissions denied: %s needs one of %s"
                % (user.email, permission_keys)
            )
            raise _forbidden(
                "Access denied. You need at least one of these permissions: "
                + ", ".join(format_permission_name(key) for key in permission_keys)
            )

        raise _unauthorized()

    return checker


async def admin_only(user: UserDataModel = Depends(get_current_user)):
    if user.role == ROLE_STAFF:
        raise _forbidden("Access denied. This action requires admin privileges.")
    if user.role != ROLE_ADMIN:
        raise _unauthorized("Unauthorized access. Admin credentials required.")
    return user
