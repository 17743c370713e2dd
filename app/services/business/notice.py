"""
Order hours notice rendering.

Turns an OrderHoursInfo into the title/description/footer shown to customers
while ordering is closed. Tenants may override each line with a template that
contains the placeholders {{startTime}} and {{endTime}}.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional

from app.schemas.order_hours import TOKEN_PATTERN
from .hours import OrderHoursInfo


DEFAULT_TITLE_DELIVERY_OPEN = "Wir befinden uns gerade außerhalb unserer Bestellzeiten"
DEFAULT_TITLE_CLOSED = "Die Bestellannahme ist vorübergehend geschlossen"
DEFAULT_DESCRIPTION = "Unsere Bestellzeiten sind von {start_time} bis {end_time}."
DEFAULT_DESCRIPTION_UNKNOWN = "Unsere Bestellzeiten werden in Kürze veröffentlicht."
DEFAULT_FOOTER = (
    "Sie können trotzdem vorbestellen; Ihre Bestellung wird innerhalb der angegebenen Zeiten bearbeitet."
)


@dataclass
class Notice:
    title: str
    description: str
    footer: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def apply_tokens(text: str, replacements: Mapping[str, Optional[str]]) -> str:
    """replace whitelisted tokens; unknown placeholders are left untouched."""
    if not text:
        return ""
    return TOKEN_PATTERN.sub(lambda m: replacements.get(m.group(1)) or "", text)


def render_notice(
    order_hours_info: Optional[OrderHoursInfo],
    notice_settings: Optional[Mapping[str, Optional[str]]] = None,
) -> Optional[Notice]:
    """render the closed-hours notice, or None while ordering is possible."""
    if order_hours_info is None or order_hours_info.is_within_order_hours:
        return None

    start_time = order_hours_info.start_time
    end_time = order_hours_info.end_time
    token_values = {"startTime": start_time or "", "endTime": end_time or ""}

    if order_hours_info.is_delivery_open:
        default_title = DEFAULT_TITLE_DELIVERY_OPEN
    else:
        default_title = DEFAULT_TITLE_CLOSED

    if start_time and end_time:
        default_description = DEFAULT_DESCRIPTION.format(start_time=start_time, end_time=end_time)
    else:
        default_description = DEFAULT_DESCRIPTION_UNKNOWN

    templates = notice_settings or {}

    def resolve(field: str, default: str) -> str:
        template = templates.get(field)
        return apply_tokens(template, token_values) if template else default

    return Notice(
        title=resolve("title", default_title),
        description=resolve("description", default_description),
        footer=resolve("footer", DEFAULT_FOOTER),
    )
