from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas.auth import AdminLoginRequest, LoginRequest, TechnicianTokenResponse, TokenResponse
from ..schemas.technicians import Technician, TechnicianResponse
from ..services.exceptions import InvalidCredentialsError
from ..workspace import Workspace, get_workspace
from ..logging import structlog
from .security import (
    ADMIN_SUBJECT,
    ROLE_ADMIN,
    ROLE_TECHNICIAN,
    create_access_token,
    get_current_technician,
    verify_admin_password,
)


router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


@router.post("/login", response_model=TechnicianTokenResponse)
def login(req: LoginRequest, workspace: Workspace = Depends(get_workspace)):
    technician = workspace.identities.find_by_credentials(req.login, req.password)
    if technician is None:
        logger.info("login_failed", login=req.login)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=InvalidCredentialsError.message)
    token = create_access_token(technician.id, roles=[ROLE_TECHNICIAN])
    logger.info("login_succeeded", technician_id=technician.id)
    return TechnicianTokenResponse(
        access_token=token,
        technician=TechnicianResponse.model_validate(technician.model_dump()),
    )


@router.post("/admin", response_model=TokenResponse)
def admin_login(req: AdminLoginRequest):
    if not verify_admin_password(req.password):
        logger.info("admin_login_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect administrative password.")
    return TokenResponse(access_token=create_access_token(ADMIN_SUBJECT, roles=[ROLE_ADMIN]))


@router.get("/me", response_model=TechnicianResponse)
def me(technician: Technician = Depends(get_current_technician)):
    return TechnicianResponse.model_validate(technician.model_dump())
