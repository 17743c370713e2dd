"""
Daily MHD check: finds processed products whose best-before date is today,
marks them as notified and mails every admin a summary.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Query, Session

from app import models
from app.core.config import settings
from app.services.email.email_sender import send_email
from .service import PROCESSED_ACTIONS, get_today, latest_actions

logger = logging.getLogger(__name__)

SendFunc = Callable[..., Dict[str, Any]]


@dataclass
class ExpiryCheckResult:
    success: bool
    message: str
    count: int = 0
    email_results: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message, "count": self.count}
        if self.email_results is not None:
            data["emailResults"] = self.email_results
        if self.error is not None:
            data["error"] = self.error
        return data


def candidate_query(db: Session, today: date) -> Query:
    """unnotified products expiring today, row-locked until the marking commit.

    Rows locked by a concurrent run (cron and the admin endpoint) are skipped, so
    each product is mailed once. SQLite ignores the lock clause.
    """
    return (
        db.query(models.Product)
        .filter(
            models.Product.expiry_date == today,
            models.Product.exclude_from_expiry_check.is_(False),
            (models.Product.expiry_notified_on.is_(None)) | (models.Product.expiry_notified_on != today),
        )
        .order_by(models.Product.id.asc())
        .with_for_update(skip_locked=True)
    )


def find_processed_products_expiring(db: Session, today: date) -> List[models.Product]:
    """products expiring today whose latest action is labeled/removed and that were not notified yet."""
    candidates = candidate_query(db, today).all()
    actions = latest_actions(db, [p.id for p in candidates])
    return [p for p in candidates if p.id in actions and actions[p.id].action_type in PROCESSED_ACTIONS]


def get_admin_recipients(db: Session) -> List[Dict[str, Optional[str]]]:
    """active admins from the db plus ADMIN_EMAILS, one entry per address."""
    recipients: Dict[str, Dict[str, Optional[str]]] = {}
    admins = db.query(models.Admin).filter(models.Admin.is_active.is_(True)).order_by(models.Admin.id.asc()).all()
    for admin in admins:
        recipients.setdefault(admin.email.lower(), {"email": admin.email, "name": admin.first_name})
    for email in settings.ADMIN_EMAILS:
        recipients.setdefault(email.lower(), {"email": email, "name": None})
    return list(recipients.values())


def _send_one(send: SendFunc, recipient: Dict[str, Optional[str]], variables: Dict[str, Any],
              idempotency_key: str) -> Dict[str, Any]:
    try:
        result = send(
            template="expiry_alert",
            to=recipient["email"],
            variables={**variables, "admin_name": recipient["name"]},
            idempotency_key=idempotency_key,
            locale=settings.EMAIL_LOCALE,
        )
    except Exception as e:
        logger.error(f"Expiry alert to {recipient['email']} failed: {e}")
        return {"success": False, "recipient": recipient["email"], "status": "error", "error": str(e)}

    return {
        "success": result.get("status") == "sent",
        "recipient": recipient["email"],
        "status": result.get("status"),
        **({"error": result.get("error") or result.get("reason")} if result.get("status") != "sent" else {}),
    }


def notify_admins(recipients: List[Dict[str, Optional[str]]], variables: Dict[str, Any],
                  send: SendFunc = send_email, idempotency_key: str = "",
                  max_workers: Optional[int] = None) -> List[Dict[str, Any]]:
    """send to all recipients concurrently and wait for every send; results keep recipient order."""
    if not recipients:
        return []
    workers = max(1, min(max_workers or settings.EXPIRY_MAIL_WORKERS, len(recipients)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_send_one, send, r, variables, f"{idempotency_key}:{r['email']}") for r in recipients]
        return [f.result() for f in futures]


def check_expired_products_and_notify_admins(
    db: Session,
    send: SendFunc = send_email,
    today: Optional[date] = None,
) -> ExpiryCheckResult:
    """run the daily MHD check once; storage faults yield success=False without sending anything."""
    today = today or get_today()

    try:
        products = find_processed_products_expiring(db, today)
        if not products:
            return ExpiryCheckResult(success=True, message="Keine bearbeiteten Produkte mit heutigem MHD gefunden", count=0)

        actions = latest_actions(db, [p.id for p in products])
        product_rows = [
            {"id": p.id, "name": p.name, "barcode": p.barcode, "last_action": actions[p.id].action_type}
            for p in products
        ]
        recipients = get_admin_recipients(db)

        for product in products:
            product.expiry_notified_on = today
            db.add(product)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception("MHD check failed")
        return ExpiryCheckResult(
            success=False,
            message="MHD-Prüfung fehlgeschlagen",
            count=0,
            error=str(e) or e.__class__.__name__,
        )

    count = len(product_rows)
    variables = {
        "count": count,
        "products": product_rows,
        "date": today.strftime("%d.%m.%Y"),
        "dashboard_url": f"{settings.FRONTEND_URL}/admin/expiry",
    }
    email_results = notify_admins(
        recipients, variables, send=send, idempotency_key=f"expiry-{settings.TENANT_NAME}-{today.isoformat()}"
    )
    sent = sum(1 for r in email_results if r["success"])
    logger.info(f"MHD check: {count} product(s), {sent}/{len(email_results)} admin(s) notified")

    return ExpiryCheckResult(
        success=True,
        message=f"{count} Produkt(e) mit heutigem MHD gefunden, {sent}/{len(email_results)} Admin(s) benachrichtigt",
        count=count,
        email_results=email_results,
    )
