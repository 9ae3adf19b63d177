import uuid

from pydantic import BaseModel


class PostingResult(BaseModel):
    sale_id: uuid.UUID
    total_cents: int = 0
    factory_amount_cents: int = 0
    industry_amount_cents: int = 0
    platform_fee_cents: int = 0
    coproducer_amount_cents: int = 0
    affiliate_amount_cents: int = 0
    gateway_fee_cents: int = 0
    tenant_amount_cents: int = 0
    already_processed: bool = False
