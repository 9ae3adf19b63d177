import uuid
from typing import List

from pydantic import BaseModel, Field, computed_field

from schemas import ReversalKind


class DebitedBeneficiary(BaseModel):
    role: str
    account_id: uuid.UUID
    holder_name: str
    amount_debited: int
    new_balance: int
    bucket: str


class ReversalResult(BaseModel):
    sale_id: uuid.UUID
    kind: ReversalKind
    debited: List[DebitedBeneficiary] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    no_liable_splits: bool = False
    already_processed: bool = False

    @computed_field
    @property
    def debited_count(self) -> int:
        return len(self.debited)

    @property
    def ok(self) -> bool:
        return not self.errors
