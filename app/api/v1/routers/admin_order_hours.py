from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.security import require_admin, require_superadmin
from app.db.session import get_db
from app import models
from app.schemas.order_hours import OrderHoursAdminOut, OrderHoursUpdate
from app.services.business import (
    OrderHoursService,
    load_notice_settings,
    load_order_hours_config,
    save_order_hours,
)

router = APIRouter(prefix="/admin/order-hours", tags=["admin"])


def _admin_view(db: Session) -> dict:
    config = load_order_hours_config(db)
    return {
        "config": config,
        "notice": load_notice_settings(db),
        "current": OrderHoursService(config).evaluate().to_dict(),
    }


@router.get("", response_model=OrderHoursAdminOut)
def get_order_hours(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_admin),
):
    """get order hours config, notice templates and the current status."""
    return _admin_view(db)


@router.put("", response_model=OrderHoursAdminOut)
def update_order_hours(
    payload: OrderHoursUpdate,
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_superadmin),
):
    """replace the weekly config and/or the notice templates (validated on save)."""
    save_order_hours(db, config=payload.config, notice=payload.notice)
    return _admin_view(db)


@router.post("/pause", response_model=OrderHoursAdminOut)
def pause_ordering(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_superadmin),
):
    """stop accepting orders until resumed."""
    config = load_order_hours_config(db)
    save_order_hours(db, config=config.model_copy(update={"ordering_paused": True}))
    return _admin_view(db)


@router.post("/resume", response_model=OrderHoursAdminOut)
def resume_ordering(
    db: Session = Depends(get_db),
    _: models.Admin = Depends(require_superadmin),
):
    config = load_order_hours_config(db)
    save_order_hours(db, config=config.model_copy(update={"ordering_paused": False}))
    return _admin_view(db)
