import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from api.crud import audit, split as splits, transaction as transactions
from api.crud.account import AccountStore
from api.models import (
    BalanceBucket,
    PaymentStatus,
    Sale,
    SaleStatus,
    SplitType,
    TransactionStatus,
    TransactionType,
    VirtualAccount,
)
from ledger.errors import (
    AccountResolutionFailure,
    AlreadyProcessed,
    InvalidState,
    NoLiableSplits,
    PartialReversalFailure,
    SaleNotFound,
    describe,
)
from ledger.notifier import ReversalNotifier
from schemas import RefundRequested, ReversalKind
from .schemas import DebitedBeneficiary, ReversalResult


TERMINAL_PAYMENT_STATUS = {
    ReversalKind.refund: PaymentStatus.refunded,
    ReversalKind.chargeback: PaymentStatus.chargedback,
}


@dataclass(frozen=True)
class LiableSplit:
    split_type: SplitType
    account_id: Optional[uuid.UUID]
    transaction_id: Optional[uuid.UUID]
    debit_cents: int


def debit_reference(sale_id: uuid.UUID, kind: ReversalKind, split_type: SplitType) -> str:
    return f"{sale_id}:{kind.value}:{split_type.value}"


class ReversalService:
    def __init__(
        self,
        session: AsyncSession,
        accounts: Optional[AccountStore] = None,
        notifier: Optional[ReversalNotifier] = None,
    ):
        self.session = session
        self.accounts = accounts or AccountStore()
        self.notifier = notifier or ReversalNotifier()

    async def handle_refund_requested(self, event: RefundRequested) -> ReversalResult:
        """
        Debits every split liable for the reversal kind and cancels the sale.

        Each split is reversed in its own database transaction: the debit row
        (keyed by sale, kind and split type) and the balance decrement commit
        together. A failure on one split is reported in the result and does
        not stop the others. Calling this again for a sale that already
        reached the terminal status of the same kind debits nothing twice.
        """
        sale_id = event.sale_id
        kind = event.kind
        sale = await self.session.get(Sale, sale_id, populate_existing=True)
        if not sale:
            raise SaleNotFound(f"Sale {sale_id} not found")

        terminal = TERMINAL_PAYMENT_STATUS[kind]
        retry = sale.payment_status == terminal
        if not retry and sale.payment_status != PaymentStatus.paid:
            raise InvalidState(
                f"Cannot apply {kind.value} to sale {sale_id} with payment status {sale.payment_status.value}"
            )

        result = ReversalResult(sale_id=sale_id, kind=kind, already_processed=retry)
        liable = [
            LiableSplit(
                split_type=row.split_type,
                account_id=row.virtual_account_id,
                transaction_id=row.transaction_id,
                # a zero net means nothing was ever credited for this split
                debit_cents=row.net_amount_cents if row.net_amount_cents is not None else row.gross_amount_cents,
            )
            for row in await splits.list_liable(self.session, sale_id, TransactionType(kind.value))
        ]

        if not liable:
            result.no_liable_splits = True
            logging.warning(f"[Reverser] {describe(NoLiableSplits(f'sale {sale_id} has nothing liable for {kind.value}'))}")

        for split in liable:
            if split.debit_cents <= 0:
                logging.info(f"[Reverser] Nothing to debit for {split.split_type.value} split of sale {sale_id}")
                continue
            try:
                debited = await self._reverse_split(sale_id, split, event)
                await self.session.commit()
            except AlreadyProcessed as e:
                # the conflicting insert wrote nothing; committing only releases the credit lock
                await self.session.commit()
                logging.info(f"[Reverser] {describe(e)}")
                continue
            except AccountResolutionFailure as e:
                await self.session.rollback()
                logging.error(f"[Reverser] {describe(e)}")
                result.errors.append(describe(e))
                continue
            except Exception as e:
                await self.session.rollback()
                logging.exception(f"[Reverser] Error processing {kind.value} for {split.split_type.value} split of sale {sale_id}")
                result.errors.append(describe(PartialReversalFailure(f"{split.split_type.value}: {e}")))
                continue

            result.debited.append(debited)

        await self.session.execute(
            update(Sale)
            .where(Sale.id == sale_id)
            .values(status=SaleStatus.cancelled, payment_status=terminal)
            .execution_options(synchronize_session=False)
        )
        audit.record(
            self.session,
            action=f"sale.{kind.value}",
            entity="sale",
            entity_id=sale_id,
            actor=event.requested_by or "system",
            payload={
                "reason": event.reason,
                "amount_cents": event.amount_cents,
                "reference_id": event.reference_id,
                "debited": [d.model_dump(mode="json") for d in result.debited],
                "errors": result.errors,
                "retry": retry,
            },
        )
        await self.session.commit()

        logging.info(
            f"[Reverser] Completed {kind.value} for sale {sale_id}: "
            f"{result.debited_count} accounts debited, {len(result.errors)} errors"
        )

        if result.debited:
            try:
                await self.notifier.accounts_debited(
                    sale_id=sale_id, kind=kind, reason=event.reason, debited=result.debited
                )
            except Exception:
                logging.exception(f"[Reverser] Could not enqueue notifications for sale {sale_id}")

        return result

    async def _reverse_split(
        self,
        sale_id: uuid.UUID,
        split: LiableSplit,
        event: RefundRequested,
    ) -> DebitedBeneficiary:
        kind = event.kind
        if split.account_id is None:
            raise AccountResolutionFailure(f"{split.split_type.value} split of sale {sale_id} has no account")
        account = await self.session.get(VirtualAccount, split.account_id)
        if not account:
            raise AccountResolutionFailure(
                f"Account {split.account_id} of {split.split_type.value} split of sale {sale_id} not found"
            )

        # locks the credit, the release job waits for this split's commit
        original = await transactions.find_credit_for(self.session, sale_id, account.id, split.transaction_id)
        # a credit that has not matured yet still sits in the pending bucket
        from_pending = original is None or original.status != TransactionStatus.completed
        bucket = BalanceBucket.pending if from_pending else BalanceBucket.available

        description = f"{kind.value.capitalize()} - sale #{str(sale_id)[:8]} (from {bucket.value})"
        if event.reference_id:
            description += f" ref {event.reference_id}"
        if event.reason:
            description += f": {event.reason}"

        reference_id = debit_reference(sale_id, kind, split.split_type)
        tx_id = await transactions.insert_if_absent(
            self.session,
            virtual_account_id=account.id,
            sale_id=sale_id,
            transaction_type=TransactionType(kind.value),
            amount_cents=-split.debit_cents,
            fee_cents=0,
            net_amount_cents=-split.debit_cents,
            status=TransactionStatus.completed,
            reference_id=reference_id,
            reverses_transaction_id=original.id if original else None,
            description=description,
        )
        if tx_id is None:
            raise AlreadyProcessed(f"{kind.value} of {split.split_type.value} split of sale {sale_id} already debited")

        updated = await self.accounts.adjust_balance(self.session, account.id, bucket, -split.debit_cents)
        new_balance = updated.pending_balance_cents if from_pending else updated.balance_cents
        logging.info(
            f"[Reverser] Debited {split.debit_cents} from {split.split_type.value} {bucket.value.upper()} balance "
            f"of account {account.id} for {kind.value}"
        )
        return DebitedBeneficiary(
            role=split.split_type.value,
            account_id=account.id,
            holder_name=updated.holder_name,
            amount_debited=split.debit_cents,
            new_balance=new_balance,
            bucket=bucket.value,
        )
