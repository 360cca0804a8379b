from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.security import ROLE_ADMIN, get_current_technician, get_token_payload, require_admin
from ..schemas.orders import OrderDocument, OrderSubmit, ServiceOrder, ShiftStatus
from ..schemas.technicians import Technician
from ..services.exceptions import ShiftClosedError
from ..services.time_rules import format_hhmm
from ..workspace import Workspace, get_workspace


router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/shift", response_model=ShiftStatus)
def shift_status(
    technician: Technician = Depends(get_current_technician),
    workspace: Workspace = Depends(get_workspace),
):
    """Pre-check offered before the capture form is opened"""
    return ShiftStatus(
        within_shift=workspace.workflow.can_issue(technician),
        now=format_hhmm(workspace.workflow.clock()),
        shift_start=technician.shift_start,
        shift_end=technician.shift_end,
    )


@router.post("", response_model=ServiceOrder, status_code=201)
def submit_order(
    payload: OrderSubmit,
    technician: Technician = Depends(get_current_technician),
    workspace: Workspace = Depends(get_workspace),
):
    # admission is re-checked here: the shift may have closed since the pre-check
    try:
        return workspace.workflow.submit(technician, payload.fields)
    except ShiftClosedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)


@router.get("/mine", response_model=List[ServiceOrder])
def list_my_orders(
    technician: Technician = Depends(get_current_technician),
    workspace: Workspace = Depends(get_workspace),
):
    return workspace.ledger.list_by_technician(technician.id)


@router.get("", response_model=List[ServiceOrder])
def list_orders(
    technician_id: Optional[str] = None,
    workspace: Workspace = Depends(get_workspace),
    _=Depends(require_admin),
):
    """Order history, newest first"""
    if technician_id:
        return workspace.ledger.list_by_technician(technician_id)
    return workspace.ledger.list_all()


@router.get("/{order_id}/document", response_model=OrderDocument)
def order_document(
    order_id: str,
    payload: dict = Depends(get_token_payload),
    workspace: Workspace = Depends(get_workspace),
):
    """Materialized order plus active branding, for document rendering"""
    order = workspace.ledger.get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    is_admin = ROLE_ADMIN in payload.get("roles", [])
    if not is_admin and order.technician_id != payload.get("sub"):
        raise HTTPException(status_code=403, detail="Forbidden")
    return OrderDocument(order=order, settings=workspace.schema.get_settings())
