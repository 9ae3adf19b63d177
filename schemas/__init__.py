import enum
import uuid
from typing import Optional

from pydantic import BaseModel, Field


class ReversalKind(str, enum.Enum):
    refund = "refund"
    chargeback = "chargeback"


# Gateway adapters translate their webhook payloads into these two events;
# the ledger never looks at gateway-specific fields.

class PaymentConfirmed(BaseModel):
    sale_id: uuid.UUID
    total_cents: int = Field(..., ge=0)
    gateway_fee_cents: int = Field(default=0, ge=0, description="Taken by the gateway out of the tenant share")
    reference_id: Optional[str] = Field(default=None, description="Gateway payment id, kept in the audit trail")


class RefundRequested(BaseModel):
    sale_id: uuid.UUID
    amount_cents: int = Field(..., ge=0)
    reason: Optional[str] = None
    kind: ReversalKind = ReversalKind.refund
    reference_id: Optional[str] = Field(
        default=None,
        description="Gateway refund/dispute id, kept in the audit trail; debits are keyed by sale and kind",
    )
    requested_by: Optional[str] = None
