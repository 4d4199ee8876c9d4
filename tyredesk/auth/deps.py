from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tyredesk.auth.jwt import decode_token
from tyredesk.core.logging_config import logger

security = HTTPBearer(auto_error=False)  # we answer 401 ourselves


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None


def _extract_token(
    request: Request, creds: HTTPAuthorizationCredentials | None
) -> str | None:
    # 1) Authorization header
    if creds and creds.credentials:
        return creds.credentials

    # 2) cookie
    cookie_token = request.cookies.get("access_token")
    if cookie_token:
        return cookie_token

    return None


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser:
    token = _extract_token(request, creds)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_token(token)
    except jwt.PyJWTError as e:
        logger.info("auth_token_rejected", reason=e.__class__.__name__)
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    # rate limiter key
    request.state.user_id = str(user_id)
    return CurrentUser(id=str(user_id), email=payload.get("email"))
