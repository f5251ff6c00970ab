from datetime import timedelta, datetime, timezone
from typing import Dict, Optional
from pydantic import BaseModel
import jwt
import http
import os
from fastapi import HTTPException

from context_manager.context import context_user_data
from logger import logger


# schema
class UserDataModel(BaseModel):
    id: int
    client_id: Optional[int] = None
    email: Optional[str] = None
    role: str = "client"
    permissions: Dict[str, bool] = {}
    status: str = "active"

    def __str__(self):
        return f"user={self.id} client={self.client_id} role={self.role}"


# JWT configuration
class JWTToken:
    algorithm = os.getenv("JWT_ALGORITHM", "HS256")
    secret = os.getenv("JWT_SECRET", "secret_key")
    access_token_expire_minutes = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "360"))


class JWTHandler:
    @staticmethod
    def create_access_token(to_encode: dict, expires_delta: timedelta = None):
        user_data = to_encode.copy()
        if "status" not in user_data:
            user_data["status"] = "active"

        expires_delta = expires_delta or timedelta(
            minutes=JWTToken.access_token_expire_minutes
        )
        expire = datetime.now(timezone.utc) + expires_delta
        user_data.update({"exp": int(expire.timestamp())})

        return jwt.encode(user_data, JWTToken.secret, algorithm=JWTToken.algorithm)

    @staticmethod
    def decode_access_token(token: str) -> UserDataModel:
        try:
            payload = jwt.decode(
                token, JWTToken.secret, algorithms=[JWTToken.algorithm]
            )
            user_data = UserDataModel(**payload)

        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=http.HTTPStatus.UNAUTHORIZED,
                detail={"message": "Token has expired", "status": False},
            )
        except Exception as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error while decoding access token: {e}",
            )
            raise HTTPException(
                status_code=http.HTTPStatus.UNAUTHORIZED,
                detail={
                    "message": "Invalid authentication credentials",
                    "status": False,
                },
            )

        context_user_data.set(user_data)
        return user_data
