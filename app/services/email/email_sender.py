import logging
import re
from html import escape
from typing import Dict, List, Optional, Any

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

# resend accepts only ASCII letters, digits, _ and - in tag names and values
TAG_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")

# template configs
TEMPLATES = {
    "expiry_alert": {
        "subject": "MHD alert: {count} product(s) expire today",
        "required_vars": ["count", "products", "date"],
        "optional_vars": ["admin_name", "dashboard_url"]
    },
}

SUBJECTS = {
    "expiry_alert": {
        "de": "MHD-Hinweis: {count} Produkt(e) laufen heute ab",
        "en": "MHD alert: {count} product(s) expire today",
    },
}

TEXTS = {
    "hello": {"de": "Hallo", "en": "Hello"},
    "expiry_intro": {
        "de": "Die folgenden bereits bearbeiteten Produkte erreichen heute ({date}) ihr Mindesthaltbarkeitsdatum:",
        "en": "The following already processed products reach their best-before date today ({date}):",
    },
    "product": {"de": "Produkt", "en": "Product"},
    "barcode": {"de": "Barcode", "en": "Barcode"},
    "last_action": {"de": "Letzte Aktion", "en": "Last action"},
    "labeled": {"de": "Etikettiert", "en": "Labeled"},
    "removed": {"de": "Aus dem Regal genommen", "en": "Removed from shelf"},
    "please_check": {
        "de": "Bitte prüfen Sie die Produkte im Regal.",
        "en": "Please check these products on the shelf.",
    },
    "open_dashboard": {"de": "MHD-Verwaltung öffnen", "en": "Open expiry management"},
}


def get_text(key: str, locale: str) -> str:
    entry = TEXTS.get(key, {})
    return entry.get(locale, entry.get("en", ""))


def select_subject(template: str, variables: Dict[str, Any], locale: str = "de") -> str:
    """select and format subject line for a template with locale support."""
    if template not in TEMPLATES:
        return f"Benachrichtigung von {settings.FROM_NAME}"

    subject_template = SUBJECTS.get(template, {}).get(locale, TEMPLATES[template]["subject"])
    try:
        return subject_template.format(**variables)
    except (KeyError, ValueError):
        return subject_template


def render_template(template: str, variables: Dict[str, Any], locale: str = "de") -> str:
    """render HTML template with variables and locale support."""
    if template == "expiry_alert":
        admin_name = escape(str(variables.get("admin_name") or ""))
        products: List[Dict[str, Any]] = variables.get("products", [])
        dashboard_url = variables.get("dashboard_url")

        rows = "".join(
            f"<tr><td>{escape(str(p.get('name', '')))}</td>"
            f"<td>{escape(str(p.get('barcode') or '-'))}</td>"
            f"<td>{escape(get_text(p.get('last_action') or '', locale) or '-')}</td></tr>"
            for p in products
        )
        greeting = f"{get_text('hello', locale)} {admin_name}!" if admin_name else f"{get_text('hello', locale)}!"
        button = (
            f'<p><a href="{escape(dashboard_url)}" style="background: #d97706; color: white; padding: 12px 24px; '
            f'text-decoration: none; border-radius: 4px;">{get_text("open_dashboard", locale)}</a></p>'
            if dashboard_url else ""
        )

        html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2>{greeting}</h2>
            <p>{get_text('expiry_intro', locale).format(date=escape(str(variables.get('date', ''))))}</p>
            <table style="width: 100%; border-collapse: collapse;">
                <tr><th align="left">{get_text('product', locale)}</th><th align="left">{get_text('barcode', locale)}</th><th align="left">{get_text('last_action', locale)}</th></tr>
                {rows}
            </table>
            <p>{get_text('please_check', locale)}</p>
            {button}
        </div>
        """
    else:
        html = "<p>Benachrichtigung</p>"

    return html


def send_email(
    template: str,
    to: str,
    variables: Dict[str, Any],
    idempotency_key: Optional[str] = None,
    locale: str = "de"
) -> Dict[str, Any]:
    """
    Send transactional email using Resend API.

    Args:
        template: Email template name (expiry_alert)
        to: Recipient email address
        variables: Template variables
        idempotency_key: Optional key for preventing duplicate sends
        locale: Locale code for localized content (de, en)

    Returns:
        Dict with result including message_id from Resend
    """
    if not settings.RESEND_API_KEY or not settings.FROM_EMAIL:
        return {"status": "skipped", "reason": "resend_not_configured", "recipient": to}

    if template not in TEMPLATES:
        return {"status": "error", "reason": "invalid_template", "template": template}

    required_vars = TEMPLATES[template]["required_vars"]
    missing_vars = [var for var in required_vars if var not in variables]
    if missing_vars:
        return {"status": "error", "reason": "missing_variables", "missing": missing_vars}

    subject = select_subject(template, variables, locale)
    html = render_template(template, variables, locale)
    tags = {"category": template, "tenant": settings.TENANT_NAME}
    return send_html(to, subject, html, tags=tags, idempotency_key=idempotency_key)


def send_html(
    to: str,
    subject: str,
    html: str,
    tags: Optional[Dict[str, str]] = None,
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Send an email via Resend if configured; otherwise, no-op."""
    if not settings.RESEND_API_KEY or not settings.FROM_EMAIL:
        return {"status": "skipped", "reason": "resend_not_configured", "recipient": to}

    try:
        resend.api_key = settings.RESEND_API_KEY
        params = {
            "from": f"{settings.FROM_NAME} <{settings.FROM_EMAIL}>",
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if tags:
            params["tags"] = [
                {"name": TAG_UNSAFE.sub("_", k), "value": TAG_UNSAFE.sub("_", str(v))} for k, v in tags.items()
            ]
        if idempotency_key:
            params["headers"] = {"X-Entity-Ref-ID": idempotency_key}

        result = resend.Emails.send(params)

        message_id = result.get("id") if isinstance(result, dict) else None
        return {
            "status": "sent",
            "message_id": message_id,
            "recipient": to,
            "subject": subject
        }
    except Exception as e:
        logger.error(f"Failed to send email to {to}: {e}")
        return {"status": "error", "reason": "send_failed", "error": str(e), "recipient": to}


def health_check() -> Dict[str, Any]:
    """check email sender config and health."""
    if not settings.RESEND_API_KEY:
        return {"status": "misconfigured", "reason": "missing_api_key"}
    if not settings.FROM_EMAIL:
        return {"status": "misconfigured", "reason": "missing_from_email"}

    return {"status": "configured", "from_email": settings.FROM_EMAIL, "from_name": settings.FROM_NAME, "templates": len(TEMPLATES)}
