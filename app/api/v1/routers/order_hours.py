from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.order_hours import OrderHoursStatus
from app.services.business import (
    OrderHoursService,
    load_notice_settings,
    load_order_hours_config,
    render_notice,
)

router = APIRouter(prefix="/order-hours", tags=["order-hours"])


@router.get("", response_model=OrderHoursStatus)
def get_order_hours_status(db: Session = Depends(get_db)):
    """current ordering status and the notice to show while closed."""
    service = OrderHoursService(load_order_hours_config(db))
    info = service.evaluate()
    notice = render_notice(info, load_notice_settings(db).model_dump())

    return {
        "info": info.to_dict(),
        "notice": notice.to_dict() if notice else None,
    }
