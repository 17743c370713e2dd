"""
Expiry (MHD) management: settings, daily task lists and shelf actions.

Products turn "critical" (red) when their best-before date is within
critical_days and "warning" (orange) up to warning_days. Admins record what
they did with a product as ExpiryAction rows; the latest action that was not
undone decides whether the product still shows up.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app import models
from app.core.config import settings
from app.schemas.expiry import ExpirySettings
from app.services.business.store import get_or_create_settings

logger = logging.getLogger(__name__)

ACTION_LABELED = "labeled"
ACTION_REMOVED = "removed"
ACTION_UNDONE = "undone"
PROCESSED_ACTIONS = (ACTION_LABELED, ACTION_REMOVED)


def get_today() -> date:
    """calendar date in the shop's timezone."""
    return datetime.now(ZoneInfo(settings.ORDER_HOURS_TIMEZONE)).date()


def days_until(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def get_expiry_settings(db: Session) -> ExpirySettings:
    row = db.query(models.Settings).order_by(models.Settings.id.asc()).first()
    if row is None or not row.expiry_management_settings:
        return ExpirySettings()
    return ExpirySettings.model_validate(row.expiry_management_settings)


def update_expiry_settings(db: Session, new_settings: ExpirySettings) -> ExpirySettings:
    row = get_or_create_settings(db)
    row.expiry_management_settings = new_settings.model_dump()
    db.add(row)
    db.commit()
    logger.info("Expiry settings updated: %s", row.expiry_management_settings)
    return new_settings


def latest_actions(db: Session, product_ids: Iterable[int]) -> Dict[int, models.ExpiryAction]:
    """latest not-undone action per product."""
    product_ids = list(product_ids)
    if not product_ids:
        return {}
    actions = (
        db.query(models.ExpiryAction)
        .filter(
            models.ExpiryAction.product_id.in_(product_ids),
            models.ExpiryAction.is_undone.is_(False),
        )
        .order_by(models.ExpiryAction.created_at.desc(), models.ExpiryAction.id.desc())
        .all()
    )
    latest: Dict[int, models.ExpiryAction] = {}
    for action in actions:
        latest.setdefault(action.product_id, action)
    return latest


def _products_between(db: Session, first_day: date, last_day: date) -> List[models.Product]:
    return (
        db.query(models.Product)
        .filter(
            models.Product.expiry_date >= first_day,
            models.Product.expiry_date <= last_day,
            models.Product.exclude_from_expiry_check.is_(False),
        )
        .order_by(models.Product.expiry_date.asc(), models.Product.id.asc())
        .all()
    )


def _with_status(products: List[models.Product], actions: Dict[int, models.ExpiryAction], today: date) -> List[Dict]:
    return [
        {
            "id": p.id,
            "name": p.name,
            "barcode": p.barcode,
            "category_id": p.category_id,
            "expiry_date": p.expiry_date,
            "exclude_from_expiry_check": p.exclude_from_expiry_check,
            "days_until_expiry": days_until(p.expiry_date, today),
            "last_action": actions.get(p.id),
        }
        for p in products
    ]


def get_critical_products(db: Session, today: Optional[date] = None) -> List[Dict]:
    """products expiring within critical_days; labeled or removed ones are done."""
    today = today or get_today()
    expiry_settings = get_expiry_settings(db)
    products = _products_between(db, today, today + timedelta(days=expiry_settings.critical_days))
    actions = latest_actions(db, [p.id for p in products])

    pending = [
        p for p in products
        if not (p.id in actions and actions[p.id].action_type in PROCESSED_ACTIONS)
    ]
    return _with_status(pending, actions, today)


def get_warning_products(db: Session, today: Optional[date] = None) -> List[Dict]:
    """products after the critical range up to warning_days; labeled ones stay listed."""
    today = today or get_today()
    expiry_settings = get_expiry_settings(db)
    first_day = today + timedelta(days=expiry_settings.critical_days + 1)
    last_day = today + timedelta(days=expiry_settings.warning_days)
    if first_day > last_day:
        return []

    products = _products_between(db, first_day, last_day)
    actions = latest_actions(db, [p.id for p in products])

    pending = [
        p for p in products
        if not (p.id in actions and actions[p.id].action_type == ACTION_REMOVED)
    ]
    return _with_status(pending, actions, today)


def _get_product(db: Session, product_id: int) -> models.Product:
    product = db.get(models.Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produkt nicht gefunden")
    if not product.expiry_date:
        raise HTTPException(status_code=400, detail="Für dieses Produkt ist kein MHD hinterlegt")
    return product


def label_product(db: Session, product_id: int, admin_id: int, note: Optional[str] = None,
                  today: Optional[date] = None) -> models.ExpiryAction:
    """record that a discount label was put on the product."""
    today = today or get_today()
    product = _get_product(db, product_id)
    if product.exclude_from_expiry_check:
        raise HTTPException(status_code=400, detail="Dieses Produkt ist von der MHD-Prüfung ausgenommen")

    action = models.ExpiryAction(
        product_id=product.id,
        admin_id=admin_id,
        action_type=ACTION_LABELED,
        expiry_date=product.expiry_date,
        days_until_expiry=days_until(product.expiry_date, today),
        note=note,
    )
    db.add(action)
    db.commit()
    db.refresh(action)
    logger.info("Product %s labeled by admin %s", product.id, admin_id)
    return action


def remove_product(db: Session, product_id: int, admin_id: int, exclude_from_check: bool = False,
                   note: Optional[str] = None, new_expiry_date: Optional[date] = None,
                   today: Optional[date] = None) -> models.ExpiryAction:
    """record that the product was taken off the shelf, optionally with a new MHD."""
    today = today or get_today()
    product = _get_product(db, product_id)

    expiry_date = product.expiry_date
    if new_expiry_date:
        product.expiry_date = new_expiry_date
        expiry_date = new_expiry_date
    if exclude_from_check:
        product.exclude_from_expiry_check = True

    action = models.ExpiryAction(
        product_id=product.id,
        admin_id=admin_id,
        action_type=ACTION_REMOVED,
        expiry_date=expiry_date,
        days_until_expiry=days_until(expiry_date, today),
        excluded_from_check=exclude_from_check,
        note=note,
    )
    db.add(product)
    db.add(action)
    db.commit()
    db.refresh(action)
    logger.info("Product %s removed by admin %s (excluded=%s)", product.id, admin_id, exclude_from_check)
    return action


def undo_action(db: Session, action_id: int, admin_id: int, today: Optional[date] = None) -> models.ExpiryAction:
    """mark an action undone and record the undo itself."""
    today = today or get_today()
    action = db.get(models.ExpiryAction, action_id)
    if not action:
        raise HTTPException(status_code=404, detail="Aktion nicht gefunden")
    if action.is_undone:
        raise HTTPException(status_code=400, detail="Diese Aktion wurde bereits rückgängig gemacht")

    action.is_undone = True
    action.undone_at = datetime.utcnow()
    action.undone_by = admin_id

    if action.action_type == ACTION_REMOVED and action.excluded_from_check:
        action.product.exclude_from_expiry_check = False

    undone = models.ExpiryAction(
        product_id=action.product_id,
        admin_id=admin_id,
        action_type=ACTION_UNDONE,
        expiry_date=action.expiry_date,
        days_until_expiry=days_until(action.expiry_date, today),
        previous_action_id=action.id,
        note=f"Rückgängig gemacht: {action.action_type}",
    )
    db.add(action)
    db.add(undone)
    db.commit()
    db.refresh(undone)
    return undone


def get_action_history(db: Session, admin_id: Optional[int] = None, product_id: Optional[int] = None,
                       action_type: Optional[str] = None, limit: int = 100, offset: int = 0) -> Dict:
    query = db.query(models.ExpiryAction)
    if admin_id:
        query = query.filter(models.ExpiryAction.admin_id == admin_id)
    if product_id:
        query = query.filter(models.ExpiryAction.product_id == product_id)
    if action_type:
        query = query.filter(models.ExpiryAction.action_type == action_type)

    total = query.count()
    actions = (
        query.order_by(models.ExpiryAction.created_at.desc(), models.ExpiryAction.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {"actions": actions, "total": total, "limit": limit, "offset": offset}
