"""
Expiry (MHD) services package.

- Expiry settings and the critical/warning task lists
- Shelf actions (label, remove, undo) and their history
- The daily check that mails admins about processed products expiring today
"""

from .notifier import (
    ExpiryCheckResult,
    check_expired_products_and_notify_admins,
)

__all__ = [
    'ExpiryCheckResult',
    'check_expired_products_and_notify_admins',
]
