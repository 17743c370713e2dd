"""
Business logic services package.

This package contains services for handling business logic including:
- Order hours evaluation per tenant
- Closed-hours notice rendering
"""

from .hours import (
    OrderHoursInfo,
    OrderHoursService,
)
from .notice import (
    Notice,
    apply_tokens,
    render_notice,
)
from .store import (
    get_or_create_settings,
    load_order_hours_config,
    load_notice_settings,
    save_order_hours,
)

__all__ = [
    'OrderHoursInfo',
    'OrderHoursService',
    'Notice',
    'apply_tokens',
    'render_notice',
    'get_or_create_settings',
    'load_order_hours_config',
    'load_notice_settings',
    'save_order_hours',
]
