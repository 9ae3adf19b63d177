import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import UUID, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AccountType(enum.Enum):
    tenant = "tenant"
    affiliate = "affiliate"
    coproducer = "coproducer"
    industry = "industry"
    factory = "factory"
    platform = "platform"


class BalanceBucket(enum.Enum):
    pending = "pending"
    available = "available"


class VirtualAccount(Base):
    __tablename__ = "virtual_accounts"
    __table_args__ = (
        UniqueConstraint("organization_id", "account_type", "owner_key", name="ux_virtual_accounts_owner"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    account_type: Mapped[AccountType] = mapped_column(Enum(AccountType, name="accounttype"), nullable=False)
    # empty for the single tenant account, affiliate/coproducer id otherwise
    owner_key: Mapped[str] = mapped_column(String, nullable=False, default="", server_default="")
    holder_name: Mapped[str] = mapped_column(String, nullable=False)
    holder_email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    holder_phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    balance_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    pending_balance_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_received_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
