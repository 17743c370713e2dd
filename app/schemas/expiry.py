from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class ExpirySettings(BaseModel):
    enabled: bool = True
    warning_days: int = Field(3, ge=0, le=365, description="Days before expiry a product turns orange")
    critical_days: int = Field(0, ge=0, le=365, description="Days before expiry a product turns red (0 = same day)")

    @model_validator(mode="after")
    def check_ranges(self) -> "ExpirySettings":
        if self.warning_days < self.critical_days:
            raise ValueError("warning_days darf nicht kleiner als critical_days sein")
        return self


class AdminBrief(BaseModel):
    id: int
    first_name: str
    email: str

    class Config:
        from_attributes = True


class ExpiryActionOut(BaseModel):
    id: int
    product_id: int
    admin_id: Optional[int] = None
    action_type: str
    expiry_date: date
    days_until_expiry: int
    note: Optional[str] = None
    excluded_from_check: bool
    is_undone: bool
    undone_at: Optional[datetime] = None
    undone_by: Optional[int] = None
    previous_action_id: Optional[int] = None
    created_at: datetime
    admin: Optional[AdminBrief] = None

    class Config:
        from_attributes = True


class ExpiryProductOut(BaseModel):
    id: int
    name: str
    barcode: Optional[str] = None
    category_id: Optional[int] = None
    expiry_date: Optional[date] = None
    exclude_from_expiry_check: bool
    days_until_expiry: int
    last_action: Optional[ExpiryActionOut] = None


class LabelRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=1000)


class RemoveRequest(BaseModel):
    exclude_from_check: bool = False
    note: Optional[str] = Field(None, max_length=1000)
    new_expiry_date: Optional[date] = None
    scenario: Optional[str] = Field(None, description="out_of_stock always excludes the product from the check")


class ActionHistoryOut(BaseModel):
    actions: List[ExpiryActionOut]
    total: int
    limit: int
    offset: int


class ExpiryCheckResultOut(BaseModel):
    success: bool
    message: str
    count: int
    emailResults: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None
