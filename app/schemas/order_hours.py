import re
from datetime import time
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


TIME_PATTERN = "^([01]?[0-9]|2[0-3]):[0-5][0-9]$"
DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# token grammar for notice templates, defined once
NOTICE_TOKENS = ("startTime", "endTime")
# case-sensitive, whitespace tolerant inside the braces
TOKEN_PATTERN = re.compile(r"\{\{\s*(" + "|".join(NOTICE_TOKENS) + r")\s*\}\}")
# anything that looks like a placeholder
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]*?)\s*\}\}")


def parse_hhmm(value: str) -> time:
    hour, minute = map(int, value.split(":"))
    return time(hour, minute)


def find_unknown_tokens(text: Optional[str]) -> List[str]:
    """names of placeholders in text that are not part of the token grammar."""
    if not text:
        return []
    return [name for name in PLACEHOLDER_PATTERN.findall(text) if name not in NOTICE_TOKENS]


class DayHours(BaseModel):
    """order window for a single weekday."""
    start: Optional[str] = Field(None, description="Start of ordering in HH:MM", pattern=TIME_PATTERN)
    end: Optional[str] = Field(None, description="End of ordering in HH:MM", pattern=TIME_PATTERN)
    closed: bool = Field(False, description="No ordering on this day")

    @model_validator(mode="after")
    def check_window(self) -> "DayHours":
        if self.start and self.end and parse_hhmm(self.start) >= parse_hhmm(self.end):
            raise ValueError("Startzeit muss vor der Endzeit liegen")
        return self


def default_week() -> Dict[str, DayHours]:
    week = {day: DayHours(start="08:00", end="20:00") for day in DAY_NAMES[:6]}
    week["sunday"] = DayHours(closed=True)
    return week


class OrderHoursConfig(BaseModel):
    """per-tenant order hours configuration."""
    timezone: str = Field("Europe/Berlin", description="IANA timezone of the shop")
    ordering_paused: bool = Field(False, description="Temporarily stop accepting orders altogether")
    days: Dict[str, DayHours] = Field(default_factory=default_week)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unbekannte Zeitzone: {value}") from e
        return value

    @field_validator("days")
    @classmethod
    def check_day_names(cls, value: Dict[str, DayHours]) -> Dict[str, DayHours]:
        normalized = {name.lower(): hours for name, hours in value.items()}
        unknown = sorted(set(normalized) - set(DAY_NAMES))
        if unknown:
            raise ValueError(f"Ungültige Wochentage: {', '.join(unknown)}")
        return normalized


class NoticeSettings(BaseModel):
    """tenant templates for the closed-hours notice; empty fields fall back to defaults."""
    title: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = Field(None, max_length=1000)
    footer: Optional[str] = Field(None, max_length=1000)

    @field_validator("title", "description", "footer")
    @classmethod
    def check_tokens(cls, value: Optional[str]) -> Optional[str]:
        unknown = find_unknown_tokens(value)
        if unknown:
            allowed = ", ".join("{{%s}}" % token for token in NOTICE_TOKENS)
            raise ValueError(f"Unbekannte Platzhalter: {', '.join(unknown)} (erlaubt: {allowed})")
        return value


class OrderHoursInfoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_within_order_hours: bool = Field(..., alias="isWithinOrderHours")
    is_delivery_open: bool = Field(..., alias="isDeliveryOpen")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")


class NoticeOut(BaseModel):
    title: str
    description: str
    footer: str


class OrderHoursStatus(BaseModel):
    """public response: current status plus the notice to show, if any."""
    info: OrderHoursInfoOut
    notice: Optional[NoticeOut] = None


class OrderHoursAdminOut(BaseModel):
    config: OrderHoursConfig
    notice: NoticeSettings
    current: OrderHoursInfoOut


class OrderHoursUpdate(BaseModel):
    config: Optional[OrderHoursConfig] = None
    notice: Optional[NoticeSettings] = None
