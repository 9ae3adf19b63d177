import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from api.crud.account import AccountStore
from api.models import TransactionStatus, TransactionType, VirtualTransaction


async def release_matured_credits(
    session: AsyncSession,
    now: Optional[datetime] = None,
    accounts: Optional[AccountStore] = None,
) -> int:
    """
    Moves credits whose release date has passed from the pending to the
    available balance. Credits that were reversed while still pending are
    cancelled instead, their amount already left the pending balance.
    Returns the number of credits released.
    """
    now = now or datetime.now(timezone.utc)
    accounts = accounts or AccountStore()
    logging.info("[Releaser] Starting pending credit release...")

    due_stmt = (
        select(VirtualTransaction.id, VirtualTransaction.virtual_account_id, VirtualTransaction.amount_cents)
        .where(
            VirtualTransaction.transaction_type == TransactionType.credit,
            VirtualTransaction.status == TransactionStatus.pending,
            VirtualTransaction.release_at <= now,
        )
        .order_by(VirtualTransaction.release_at.asc())
    )
    due = (await session.execute(due_stmt)).all()

    if not due:
        logging.info("[Releaser] No credits to release.")
        return 0

    reversal = aliased(VirtualTransaction)
    released = 0
    for tx_id, account_id, amount_cents in due:
        try:
            async with session.begin_nested():
                # same lock the reverser takes before picking a bucket
                status = await session.scalar(
                    select(VirtualTransaction.status).where(VirtualTransaction.id == tx_id).with_for_update()
                )
                if status != TransactionStatus.pending:
                    continue

                # checked under the lock, a reversal may have landed after the due list was read
                reversed_ = await session.scalar(
                    select(exists().where(reversal.reverses_transaction_id == tx_id))
                )
                target = TransactionStatus.cancelled if reversed_ else TransactionStatus.completed
                await session.execute(
                    update(VirtualTransaction)
                    .where(VirtualTransaction.id == tx_id)
                    .values(status=target)
                    .execution_options(synchronize_session=False)
                )
                if reversed_:
                    logging.info(f"[Releaser] Credit {tx_id} was reversed while pending, cancelled")
                    continue
                await accounts.move_between_buckets(session, account_id, amount_cents)
            released += 1
            logging.info(f"[Releaser] Released credit {tx_id} of {amount_cents} for account {account_id}")
        except Exception as e:
            logging.error(f"[Releaser] Failed to release credit {tx_id} for account {account_id}: {e}")

    await session.commit()
    logging.info(f"[Releaser] Released {released} of {len(due)} due credits.")
    return released
