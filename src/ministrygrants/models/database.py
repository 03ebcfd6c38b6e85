"""SQLAlchemy database models for Ministry-Grants."""

from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator
import enum

from ..core.money import Money


# Largest value an INTEGER primary key can hold
MAX_ENTITY_ID = 2 ** 63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class MoneyType(TypeDecorator):
    """Stores Money as integer cents."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return Money.parse(value).cents

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Money.from_cents(int(value))

    @property
    def python_type(self):
        return Money


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on backends that store them naive."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def python_type(self):
        return datetime


class MinistryCategory(str, enum.Enum):
    """Ministry category enumeration."""
    CHURCH = "CHURCH"
    MISSIONS = "MISSIONS"
    EDUCATION = "EDUCATION"
    HUMANITARIAN = "HUMANITARIAN"
    YOUTH = "YOUTH"
    MEDIA = "MEDIA"
    HEALTHCARE = "HEALTHCARE"
    ADVOCACY = "ADVOCACY"
    OTHER = "OTHER"


class GrantStatus(str, enum.Enum):
    """Grant lifecycle status."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    FUNDED = "FUNDED"
    REJECTED = "REJECTED"


# Ministry Model
class Ministry(Base):
    """A ministry that can receive grants once verified."""
    __tablename__ = "ministries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    ein: Mapped[Optional[str]] = mapped_column(String(10), unique=True)
    category: Mapped[MinistryCategory] = mapped_column(Enum(MinistryCategory, name="ministrycategory"), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    mission: Mapped[Optional[str]] = mapped_column(Text)
    website: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(50))
    country: Mapped[str] = mapped_column(String(50), default="USA", nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    grants: Mapped[List["Grant"]] = relationship("Grant", back_populates="ministry", passive_deletes="all")

    __table_args__ = (
        Index("ix_ministries_verified_active", "verified", "active"),
    )


# Donor Model
class Donor(Base):
    """A donor who owns one or more giving funds."""
    __tablename__ = "donors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    giving_funds: Mapped[List["GivingFund"]] = relationship("GivingFund", back_populates="donor", passive_deletes=True)

    __table_args__ = (
        Index("ix_donors_last_name_first_name", "last_name", "first_name"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Giving Fund Model
class GivingFund(Base):
    """A donor-advised fund holding a balance that grants are paid from."""
    __tablename__ = "giving_funds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    balance: Mapped[Money] = mapped_column(MoneyType(), default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    donor_id: Mapped[int] = mapped_column(ForeignKey("donors.id", ondelete="CASCADE"), nullable=False, index=True)

    # Optimistic locking
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    donor: Mapped[Donor] = relationship("Donor", back_populates="giving_funds")
    grants: Mapped[List["Grant"]] = relationship("Grant", back_populates="giving_fund", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_giving_funds_balance_non_negative"),
    )


# Grant Model
class Grant(Base):
    """A grant request from a giving fund to a ministry."""
    __tablename__ = "grants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[Money] = mapped_column(MoneyType(), nullable=False)
    status: Mapped[GrantStatus] = mapped_column(Enum(GrantStatus, name="grantstatus"), default=GrantStatus.PENDING, nullable=False, index=True)
    purpose: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    giving_fund_id: Mapped[int] = mapped_column(ForeignKey("giving_funds.id", ondelete="CASCADE"), nullable=False, index=True)
    ministry_id: Mapped[int] = mapped_column(ForeignKey("ministries.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Lifecycle timestamps, each written once by its transition
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False, index=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime())
    funded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime())
    rejected_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime())

    # Optimistic locking
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    giving_fund: Mapped[GivingFund] = relationship("GivingFund", back_populates="grants")
    ministry: Mapped[Ministry] = relationship("Ministry", back_populates="grants")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_grants_amount_positive"),
    )
