from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.security import require_admin
from app.db.session import get_db
from app import models
from app.schemas.expiry import (
    ActionHistoryOut,
    ExpiryActionOut,
    ExpiryCheckResultOut,
    ExpiryProductOut,
    ExpirySettings,
    LabelRequest,
    RemoveRequest,
)
from app.services.expiry import service as expiry_service
from app.services.expiry import check_expired_products_and_notify_admins

router = APIRouter(prefix="/admin/expiry", tags=["admin"])


def _product_out(item: dict) -> ExpiryProductOut:
    last_action = item.pop("last_action")
    return ExpiryProductOut(
        **item,
        last_action=ExpiryActionOut.model_validate(last_action) if last_action else None,
    )


@router.get("/settings", response_model=ExpirySettings)
def get_settings(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    return expiry_service.get_expiry_settings(db)


@router.put("/settings", response_model=ExpirySettings)
def update_settings(
    payload: ExpirySettings,
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    return expiry_service.update_expiry_settings(db, payload)


@router.get("/critical", response_model=List[ExpiryProductOut])
def get_critical(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    """products in the red range that still need an action"""
    return [_product_out(p) for p in expiry_service.get_critical_products(db)]


@router.get("/warning", response_model=List[ExpiryProductOut])
def get_warning(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    """products in the orange range"""
    return [_product_out(p) for p in expiry_service.get_warning_products(db)]


@router.post("/label/{product_id}", response_model=ExpiryActionOut)
def label_product(
    product_id: int,
    payload: LabelRequest,
    db: Session = Depends(get_db),
    admin: models.Admin = Depends(require_admin),
):
    return expiry_service.label_product(db, product_id, admin.id, payload.note)


@router.post("/remove/{product_id}", response_model=ExpiryActionOut)
def remove_product(
    product_id: int,
    payload: RemoveRequest,
    db: Session = Depends(get_db),
    admin: models.Admin = Depends(require_admin),
):
    exclude = True if payload.scenario == "out_of_stock" else payload.exclude_from_check
    return expiry_service.remove_product(
        db, product_id, admin.id,
        exclude_from_check=exclude,
        note=payload.note,
        new_expiry_date=payload.new_expiry_date,
    )


@router.post("/undo/{action_id}", response_model=ExpiryActionOut)
def undo_action(
    action_id: int,
    db: Session = Depends(get_db),
    admin: models.Admin = Depends(require_admin),
):
    return expiry_service.undo_action(db, action_id, admin.id)


@router.get("/history", response_model=ActionHistoryOut)
def get_history(
    admin_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    action_type: Optional[str] = Query(None, description="labeled, removed or undone"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    return expiry_service.get_action_history(
        db, admin_id=admin_id, product_id=product_id, action_type=action_type, limit=limit, offset=offset
    )


@router.post("/check-and-notify", response_model=ExpiryCheckResultOut)
def check_and_notify(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    """run the daily MHD check on demand"""
    return check_expired_products_and_notify_admins(db).to_dict()
