import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from api.models import AccountType, SplitType, TransactionStatus, TransactionType


class AccountRead(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    account_type: AccountType
    holder_name: str
    holder_email: Optional[str] = None
    balance_cents: int
    pending_balance_cents: int
    total_received_cents: int

    class Config:
        from_attributes = True


class SplitRead(BaseModel):
    id: uuid.UUID
    sale_id: uuid.UUID
    virtual_account_id: Optional[uuid.UUID] = None
    split_type: SplitType
    gross_amount_cents: int
    fee_cents: int
    net_amount_cents: int
    percentage: Decimal
    liable_for_refund: bool
    liable_for_chargeback: bool
    transaction_id: Optional[uuid.UUID] = None

    class Config:
        from_attributes = True


class TransactionRead(BaseModel):
    id: uuid.UUID
    virtual_account_id: uuid.UUID
    sale_id: uuid.UUID
    transaction_type: TransactionType
    amount_cents: int
    fee_cents: int
    net_amount_cents: int
    status: TransactionStatus
    reference_id: str
    reverses_transaction_id: Optional[uuid.UUID] = None
    description: Optional[str] = None
    release_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
