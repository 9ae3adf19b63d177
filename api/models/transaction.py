import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UUID, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TransactionType(enum.Enum):
    credit = "credit"
    refund = "refund"
    chargeback = "chargeback"


class TransactionStatus(enum.Enum):
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VirtualTransaction(Base):
    __tablename__ = "virtual_transactions"
    __table_args__ = (
        Index("ix_virtual_transactions_pending_release", "status", "release_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    virtual_account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("virtual_accounts.id"), nullable=False, index=True)
    sale_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("sales.id"), nullable=False, index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType, name="transactiontype"), nullable=False)

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    net_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[TransactionStatus] = mapped_column(Enum(TransactionStatus, name="transactionstatus"), nullable=False)

    # idempotency key, one row per logical posting
    reference_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    reverses_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("virtual_transactions.id"), nullable=True, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    release_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
