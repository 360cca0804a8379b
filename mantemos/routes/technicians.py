from typing import List

from fastapi import APIRouter, Depends

from ..auth.security import require_admin
from ..schemas.technicians import TechnicianCreate, TechnicianResponse
from ..workspace import Workspace, get_workspace


router = APIRouter(prefix="/technicians", tags=["technicians"])


@router.get("", response_model=List[TechnicianResponse])
def list_technicians(workspace: Workspace = Depends(get_workspace), _=Depends(require_admin)):
    """List technicians in storage order (passwords are never returned)"""
    return [TechnicianResponse.model_validate(t.model_dump()) for t in workspace.identities.list()]


@router.post("", response_model=TechnicianResponse, status_code=201)
def create_technician(
    payload: TechnicianCreate,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    technician = workspace.identities.add(payload)
    return TechnicianResponse.model_validate(technician.model_dump())


@router.delete("/{technician_id}")
def delete_technician(
    technician_id: str,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    """Remove a technician. Unknown ids are accepted; past orders keep their snapshot."""
    workspace.identities.remove(technician_id)
    return {"status": "ok"}
