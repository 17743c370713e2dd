"""
Order hours evaluation service.
Resolves a tenant's weekly order windows into the open/closed status shown in the shop.
"""
from datetime import datetime, time
from typing import Dict, Optional
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from app.schemas.order_hours import DAY_NAMES, DayHours, OrderHoursConfig, parse_hhmm


@dataclass
class OrderHoursInfo:
    """status of ordering at one point in time."""
    is_within_order_hours: bool
    is_delivery_open: bool
    start_time: Optional[str] = None  # HH:MM
    end_time: Optional[str] = None  # HH:MM

    def to_dict(self) -> Dict[str, object]:
        return {
            "isWithinOrderHours": self.is_within_order_hours,
            "isDeliveryOpen": self.is_delivery_open,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


class OrderHoursService:
    """evaluates a tenant's order hours configuration."""

    def __init__(self, config: Optional[OrderHoursConfig] = None):
        self.config = config or OrderHoursConfig()
        self.timezone = ZoneInfo(self.config.timezone)

    def get_current_time(self) -> datetime:
        """get current time in shop timezone."""
        return datetime.now(self.timezone)

    def get_hours_for_day(self, weekday: int) -> DayHours:
        """order window for a weekday (0=Monday); unconfigured days have no times."""
        if weekday not in range(7):
            raise ValueError("Weekday must be between 0 (Monday) and 6 (Sunday)")
        return self.config.days.get(DAY_NAMES[weekday]) or DayHours()

    def evaluate(self, at: Optional[datetime] = None) -> OrderHoursInfo:
        """check whether orders are accepted at the given time (default: now)."""
        if at is None:
            at = self.get_current_time()
        elif at.tzinfo is None:
            at = at.replace(tzinfo=self.timezone)
        else:
            at = at.astimezone(self.timezone)

        delivery_open = not self.config.ordering_paused
        day_hours = self.get_hours_for_day(at.weekday())

        if day_hours.closed or not day_hours.start or not day_hours.end:
            return OrderHoursInfo(is_within_order_hours=False, is_delivery_open=delivery_open)

        start: time = parse_hhmm(day_hours.start)
        end: time = parse_hhmm(day_hours.end)
        current = at.time().replace(tzinfo=None)
        within = delivery_open and start <= current < end

        return OrderHoursInfo(
            is_within_order_hours=within,
            is_delivery_open=delivery_open,
            start_time=start.strftime("%H:%M"),
            end_time=end.strftime("%H:%M"),
        )

    def get_weekly_hours(self) -> Dict[str, Dict]:
        """get formatted weekly hours for API response."""
        hours = {}
        for i, day_name in enumerate(DAY_NAMES):
            day_hours = self.get_hours_for_day(i)
            hours[day_name] = {
                "closed": day_hours.closed,
                "start": day_hours.start,
                "end": day_hours.end,
            }
        return hours
