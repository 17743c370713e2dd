from datetime import date, datetime
from sqlalchemy import Integer, String, DateTime, Date, Boolean, ForeignKey, Numeric, Text, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base


# helpers
now = datetime.utcnow


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default="admin")  # admin|superadmin
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now, onupdate=now)

    expiry_actions: Mapped[list["ExpiryAction"]] = relationship(
        "ExpiryAction", back_populates="admin", foreign_keys="ExpiryAction.admin_id"
    )


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now)

    products: Mapped[list["Product"]] = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    name: Mapped[str] = mapped_column(String(255))
    barcode: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # MHD (best-before date)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    exclude_from_expiry_check: Mapped[bool] = mapped_column(Boolean, default=False)
    expiry_notified_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now, onupdate=now)

    category: Mapped[Category | None] = relationship("Category", back_populates="products")
    expiry_actions: Mapped[list["ExpiryAction"]] = relationship(
        "ExpiryAction", back_populates="product", cascade="all, delete-orphan"
    )


class ExpiryAction(Base):
    __tablename__ = "expiry_actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    admin_id: Mapped[int | None] = mapped_column(ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    action_type: Mapped[str] = mapped_column(String(16))  # labeled|removed|undone
    expiry_date: Mapped[date] = mapped_column(Date)
    days_until_expiry: Mapped[int] = mapped_column(Integer, default=0)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    excluded_from_check: Mapped[bool] = mapped_column(Boolean, default=False)
    is_undone: Mapped[bool] = mapped_column(Boolean, default=False)
    undone_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    undone_by: Mapped[int | None] = mapped_column(ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    previous_action_id: Mapped[int | None] = mapped_column(ForeignKey("expiry_actions.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now, index=True)

    product: Mapped[Product] = relationship("Product", back_populates="expiry_actions")
    admin: Mapped[Admin | None] = relationship("Admin", back_populates="expiry_actions", foreign_keys=[admin_id])


class Settings(Base):
    """per-tenant settings, a single row."""
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_hours: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    order_hours_notice: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # {"title", "description", "footer"}
    expiry_management_settings: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now, onupdate=now)
