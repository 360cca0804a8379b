from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ..auth.security import require_admin
from ..schemas.sync import ImportResult, SyncStatus
from ..services.backup import export_filename, export_snapshot, import_snapshot
from ..services.exceptions import ImportParseFailure
from ..workspace import Workspace, get_workspace


router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status", response_model=SyncStatus)
def sync_status(workspace: Workspace = Depends(get_workspace)):
    return workspace.sync.status()


@router.post("/pull", response_model=SyncStatus)
async def pull_from_cloud(workspace: Workspace = Depends(get_workspace), _=Depends(require_admin)):
    """Reload local state from the cloud mirror"""
    await workspace.sync.pull()
    return workspace.sync.status()


@router.get("/export")
def export_backup(workspace: Workspace = Depends(get_workspace), _=Depends(require_admin)):
    data = export_snapshot(workspace.identities, workspace.ledger, workspace.schema)
    return JSONResponse(
        content=data,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_backup(
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    raw = await request.body()
    try:
        imported = import_snapshot(raw, workspace.identities, workspace.ledger, workspace.schema)
    except ImportParseFailure as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    return ImportResult(imported=imported)
