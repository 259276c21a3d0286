"""SQLAlchemy database models."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Order(Base):
    """A confirmed sale captured from an assistant invoice. Append-only."""

    __tablename__ = "orders"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # "ORD-<epoch ms>"; display id only, two sales in the same millisecond share it
    id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Free-text snapshots [{name, price, quantity}], not product references
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="confirmed")
    session_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)


class Account(Base):
    """Locally registered storefront account."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # PBKDF2-SHA256 derived key and salt, urlsafe base64
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    password_salt: Mapped[str] = mapped_column(String(64), nullable=False)
    password_iterations: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
