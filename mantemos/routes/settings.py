from fastapi import APIRouter, Depends

from ..auth.security import require_admin
from ..schemas.settings import AppSettings, FieldCreate, FieldDefinition, SettingsUpdate
from ..workspace import Workspace, get_workspace


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=AppSettings)
def get_settings(workspace: Workspace = Depends(get_workspace)):
    """Branding and capture schema; public so the login screen can be themed"""
    return workspace.schema.get_settings()


@router.patch("", response_model=AppSettings)
def update_settings(
    payload: SettingsUpdate,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    return workspace.schema.update_settings(**payload.model_dump(exclude_unset=True))


@router.post("/fields", response_model=FieldDefinition, status_code=201)
def add_field(
    payload: FieldCreate,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    return workspace.schema.add_field(payload)


@router.delete("/fields/{field_id}")
def remove_field(
    field_id: str,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    # existing orders keep their values keyed by the old label
    workspace.schema.remove_field(field_id)
    return {"status": "ok"}
