import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, List

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings
from ..schemas.technicians import Technician
from ..workspace import Workspace, get_workspace


http_bearer = HTTPBearer(auto_error=False)

ADMIN_SUBJECT = "admin"
ROLE_ADMIN = "admin"
ROLE_TECHNICIAN = "technician"


def verify_admin_password(candidate: str) -> bool:
    # master passwords are matched case-insensitively
    return bool(candidate) and candidate.lower() in settings.admin_passwords


def _create_token(sub: str, ttl_seconds: int, extra: Optional[dict] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    if extra:
        payload.update(extra)
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token


def create_access_token(subject: str, roles: Optional[List[str]] = None) -> str:
    return _create_token(subject, settings.jwt_ttl_seconds, extra={"roles": roles or []})


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_token_payload(creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)) -> dict:
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return decode_token(creds.credentials)


def get_current_technician(
    payload: dict = Depends(get_token_payload),
    workspace: Workspace = Depends(get_workspace),
) -> Technician:
    if ROLE_TECHNICIAN not in payload.get("roles", []):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    # technicians removed by the admin lose access immediately
    technician = workspace.identities.get(str(payload.get("sub")))
    if technician is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Technician not active")
    return technician


def require_admin(payload: dict = Depends(get_token_payload)) -> dict:
    if ROLE_ADMIN not in payload.get("roles", []):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return payload
