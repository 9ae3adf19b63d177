import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.crud import audit, split as splits, transaction as transactions
from api.crud.account import AccountStore
from api.models import (
    AccountType,
    BalanceBucket,
    PaymentStatus,
    Sale,
    SaleSplit,
    SaleStatus,
    SplitType,
    TransactionStatus,
    TransactionType,
)
from config import ENV
from ledger.errors import AccountResolutionFailure, AlreadyProcessed, SaleNotFound, describe
from ledger.fees import FeePolicy, resolve_fee_policy
from schemas import PaymentConfirmed
from .schemas import PostingResult

# suppliers are paid before the platform fee; without an account of their own they are paid through the tenant
SUPPLIER_SPLITS = (SplitType.factory, SplitType.industry)


def credit_reference(sale_id: uuid.UUID, split_type: SplitType) -> str:
    return f"{sale_id}:credit:{split_type.value}"


class SplitPoster:
    def __init__(self, session: AsyncSession, accounts: Optional[AccountStore] = None, env: Optional[ENV] = None):
        self.session = session
        self.accounts = accounts or AccountStore()
        self.env = env

    async def handle_payment_confirmed(self, event: PaymentConfirmed) -> PostingResult:
        """
        Splits the proceeds of a paid sale. Suppliers (factory, industry) are
        paid first, then the platform takes its fee, then the attributed
        partners (coproducer, affiliate), and the tenant gets the rest minus
        what the gateway kept. Every share is capped at what is left.
        Runs at most once per sale: a sale that already has its tenant or
        platform split is left untouched.
        """
        sale = await self.session.get(Sale, event.sale_id)
        if not sale:
            raise SaleNotFound(f"Sale {event.sale_id} not found")

        if await splits.sale_already_split(self.session, sale.id):
            logging.info(f"[SplitPoster] Sale {sale.id} already split, skipping")
            return PostingResult(sale_id=sale.id, total_cents=event.total_cents, already_processed=True)

        try:
            policy = await resolve_fee_policy(self.session, sale.organization_id, self.env)
            result = await self._post(sale, event, policy)
            await self.session.commit()
        except AlreadyProcessed as e:
            # lost the race to a concurrent delivery; nothing of this attempt is kept
            await self.session.rollback()
            logging.info(f"[SplitPoster] {describe(e)}, skipping")
            return PostingResult(sale_id=event.sale_id, total_cents=event.total_cents, already_processed=True)
        except Exception:
            await self.session.rollback()
            logging.exception(f"[SplitPoster] Failed to post splits for sale {event.sale_id}")
            raise

        logging.info(
            f"[SplitPoster] Completed splits for sale {result.sale_id}: tenant={result.tenant_amount_cents} "
            f"affiliate={result.affiliate_amount_cents} platform={result.platform_fee_cents} "
            f"suppliers={result.factory_amount_cents + result.industry_amount_cents}"
        )
        return result

    async def _post(self, sale: Sale, event: PaymentConfirmed, policy: FeePolicy) -> PostingResult:
        total_cents = event.total_cents
        if total_cents != sale.total_cents:
            logging.warning(
                f"[SplitPoster] Confirmed total {total_cents} differs from sale {sale.id} total {sale.total_cents}"
            )

        now = datetime.now(timezone.utc)
        release_at = now + timedelta(days=policy.release_days)
        tenant_account = await self.accounts.get_or_create_account(self.session, sale.organization_id, AccountType.tenant)

        attributed = await splits.list_attributed(self.session, sale.id)
        paid: Dict[SplitType, int] = {}
        remaining = total_cents

        for split in attributed:
            if split.split_type in SUPPLIER_SPLITS:
                # industries are paid on sight
                split_release = now if split.split_type == SplitType.industry else release_at
                paid[split.split_type] = await self._pay_attributed(sale, split, remaining, split_release, tenant_account.id)
                remaining -= paid[split.split_type]

        platform_fee = min(policy.platform_fee_cents(total_cents), remaining)
        remaining -= platform_fee

        for split in attributed:
            if split.split_type not in SUPPLIER_SPLITS:
                paid[split.split_type] = await self._pay_attributed(sale, split, remaining, release_at, None)
                remaining -= paid[split.split_type]

        attributed_total = sum(paid.values())
        tenant_gross = total_cents - attributed_total
        gateway_fee = min(event.gateway_fee_cents, remaining)
        tenant_amount = remaining - gateway_fee

        tenant_tx_id = await self._credit(
            sale,
            tenant_account.id,
            SplitType.tenant,
            tenant_amount,
            fee_cents=platform_fee + gateway_fee,
            release_at=release_at,
            description=f"Sale #{str(sale.id)[:8]} (- platform fee {platform_fee}, gateway fee {gateway_fee})",
        )
        tenant_split_id = await splits.insert_if_absent(
            self.session,
            sale_id=sale.id,
            virtual_account_id=tenant_account.id,
            split_type=SplitType.tenant,
            gross_amount_cents=tenant_gross,
            fee_cents=platform_fee + gateway_fee,
            net_amount_cents=tenant_amount,
            percentage=_share(tenant_gross, total_cents),
            liable_for_refund=True,
            liable_for_chargeback=True,
            transaction_id=tenant_tx_id,
        )
        if tenant_split_id is None:
            # a concurrent delivery of the same event got here first
            raise AlreadyProcessed(f"tenant split of sale {sale.id} already posted")

        # reporting only, the platform keeps its fee on every reversal
        await splits.insert_if_absent(
            self.session,
            sale_id=sale.id,
            virtual_account_id=None,
            split_type=SplitType.platform,
            gross_amount_cents=platform_fee,
            fee_cents=0,
            net_amount_cents=platform_fee,
            percentage=policy.percentage_points,
            liable_for_refund=False,
            liable_for_chargeback=False,
        )
        if gateway_fee > 0:
            await splits.insert_if_absent(
                self.session,
                sale_id=sale.id,
                virtual_account_id=None,
                split_type=SplitType.gateway_fee,
                gross_amount_cents=gateway_fee,
                fee_cents=0,
                net_amount_cents=gateway_fee,
                percentage=_share(gateway_fee, total_cents),
                liable_for_refund=False,
                liable_for_chargeback=False,
            )

        sale.payment_status = PaymentStatus.paid
        sale.status = SaleStatus.confirmed

        result = PostingResult(
            sale_id=sale.id,
            total_cents=total_cents,
            factory_amount_cents=paid.get(SplitType.factory, 0),
            industry_amount_cents=paid.get(SplitType.industry, 0),
            platform_fee_cents=platform_fee,
            coproducer_amount_cents=paid.get(SplitType.coproducer, 0),
            affiliate_amount_cents=paid.get(SplitType.affiliate, 0),
            gateway_fee_cents=gateway_fee,
            tenant_amount_cents=tenant_amount,
        )
        audit.record(
            self.session,
            action="split.posted",
            entity="sale",
            entity_id=sale.id,
            payload={
                **result.model_dump(mode="json", exclude={"sale_id", "already_processed"}),
                "reference_id": event.reference_id,
                "fee_percentage": str(policy.percentage_points),
                "fee_fixed_cents": policy.fixed_cents,
                "release_days": policy.release_days,
            },
        )
        return result

    async def _pay_attributed(
        self,
        sale: Sale,
        split: SaleSplit,
        remaining: int,
        release_at: datetime,
        fallback_account_id: Optional[uuid.UUID],
    ) -> int:
        """
        Credits a split written by attribution for its gross, capped at what is
        left of the sale, and settles the split with the amount actually paid.
        """
        account_id = split.virtual_account_id or fallback_account_id
        if account_id is None:
            raise AccountResolutionFailure(
                f"{split.split_type.value.capitalize()} split {split.id} of sale {sale.id} has no account"
            )

        amount = max(min(split.gross_amount_cents, remaining), 0)
        if amount < split.gross_amount_cents:
            logging.warning(
                f"[SplitPoster] {split.split_type.value} split of sale {sale.id} capped at {amount} "
                f"(attributed {split.gross_amount_cents})"
            )
        tx_id = await self._credit(
            sale,
            account_id,
            split.split_type,
            amount,
            fee_cents=0,
            release_at=release_at,
            description=f"{split.split_type.value.capitalize()} share - sale #{str(sale.id)[:8]}",
        )
        await splits.settle(self.session, split.id, tx_id, amount)
        return amount

    async def _credit(
        self,
        sale: Sale,
        account_id: uuid.UUID,
        split_type: SplitType,
        amount_cents: int,
        fee_cents: int,
        release_at: datetime,
        description: str,
    ) -> Optional[uuid.UUID]:
        """
        Pending credit plus the matching balance increment. The increment only
        happens when the ledger row was actually inserted.
        """
        if amount_cents <= 0:
            return None

        reference_id = credit_reference(sale.id, split_type)
        tx_id = await transactions.insert_if_absent(
            self.session,
            virtual_account_id=account_id,
            sale_id=sale.id,
            transaction_type=TransactionType.credit,
            amount_cents=amount_cents,
            fee_cents=fee_cents,
            net_amount_cents=amount_cents,
            status=TransactionStatus.pending,
            reference_id=reference_id,
            release_at=release_at,
            description=description,
        )
        if tx_id is None:
            logging.info(f"[SplitPoster] Credit {reference_id} already posted")
            existing = await transactions.get_by_reference(self.session, reference_id)
            return existing.id if existing else None

        await self.accounts.adjust_balance(
            self.session, account_id, BalanceBucket.pending, amount_cents, received_cents=amount_cents
        )
        logging.info(f"[SplitPoster] Credited {amount_cents} to {split_type.value} account {account_id} (pending)")
        return tx_id


def _share(part_cents: int, total_cents: int) -> Decimal:
    if total_cents <= 0:
        return Decimal("0")
    return (Decimal(part_cents) * 100 / Decimal(total_cents)).quantize(Decimal("0.0001"))
