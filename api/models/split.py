import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import UUID, Boolean, DateTime, Enum, ForeignKey, Integer, Numeric, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class SplitType(enum.Enum):
    tenant = "tenant"
    affiliate = "affiliate"
    coproducer = "coproducer"
    industry = "industry"
    factory = "factory"
    platform = "platform"
    # what the gateway kept; recorded for transparency, no account behind it
    gateway_fee = "gateway_fee"


class SaleSplit(Base):
    __tablename__ = "sale_splits"
    __table_args__ = (
        UniqueConstraint("sale_id", "split_type", name="ux_sale_splits_sale_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sale_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("sales.id"), nullable=False, index=True)
    # fee rows are tracked for reporting only and carry no account
    virtual_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("virtual_accounts.id"), nullable=True)
    split_type: Mapped[SplitType] = mapped_column(Enum(SplitType, name="splittype"), nullable=False)

    gross_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    net_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False, default=Decimal("0"))

    liable_for_refund: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    liable_for_chargeback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("virtual_transactions.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    account = relationship("VirtualAccount")
