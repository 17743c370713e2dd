"""Loading and saving the per-tenant settings row."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app import models
from app.core.config import settings
from app.schemas.order_hours import NoticeSettings, OrderHoursConfig

logger = logging.getLogger(__name__)


def get_or_create_settings(db: Session) -> models.Settings:
    row = db.query(models.Settings).order_by(models.Settings.id.asc()).first()
    if row is None:
        row = models.Settings()
        db.add(row)
        db.flush()
        logger.info("Created settings row for tenant %s", settings.TENANT_NAME)
    return row


def load_order_hours_config(db: Session) -> OrderHoursConfig:
    """validated order hours config; falls back to defaults in the tenant's timezone."""
    row = db.query(models.Settings).order_by(models.Settings.id.asc()).first()
    if row is None or not row.order_hours:
        return OrderHoursConfig(timezone=settings.ORDER_HOURS_TIMEZONE)
    return OrderHoursConfig.model_validate(row.order_hours)


def load_notice_settings(db: Session) -> NoticeSettings:
    row = db.query(models.Settings).order_by(models.Settings.id.asc()).first()
    if row is None or not row.order_hours_notice:
        return NoticeSettings()
    return NoticeSettings.model_validate(row.order_hours_notice)


def save_order_hours(
    db: Session,
    config: Optional[OrderHoursConfig] = None,
    notice: Optional[NoticeSettings] = None,
) -> models.Settings:
    """persist already validated config and/or notice templates."""
    row = get_or_create_settings(db)
    if config is not None:
        row.order_hours = config.model_dump()
    if notice is not None:
        row.order_hours_notice = notice.model_dump()
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
