import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.crud.dialect import conflict_insert
from api.models import TransactionType, VirtualTransaction


async def insert_if_absent(session: AsyncSession, **values) -> Optional[uuid.UUID]:
    """
    Append a ledger entry unless one with the same reference_id exists.
    Returns the new id, or None when the reference was already posted.
    """
    values.setdefault("id", uuid.uuid4())
    stmt = (
        conflict_insert(session, VirtualTransaction)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["reference_id"])
        .returning(VirtualTransaction.id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_reference(session: AsyncSession, reference_id: str) -> Optional[VirtualTransaction]:
    return await session.scalar(select(VirtualTransaction).where(VirtualTransaction.reference_id == reference_id))


async def find_credit_for(
    session: AsyncSession,
    sale_id: uuid.UUID,
    account_id: uuid.UUID,
    transaction_id: Optional[uuid.UUID] = None,
) -> Optional[VirtualTransaction]:
    """
    The credit a split was paid with, row-locked until the caller commits so the
    release job cannot move it between buckets while a reversal is deciding
    which bucket to debit.
    """
    if transaction_id:
        linked = await session.get(VirtualTransaction, transaction_id, populate_existing=True, with_for_update=True)
        if linked:
            return linked

    stmt = (
        select(VirtualTransaction)
        .where(
            VirtualTransaction.sale_id == sale_id,
            VirtualTransaction.virtual_account_id == account_id,
            VirtualTransaction.transaction_type == TransactionType.credit,
        )
        .order_by(VirtualTransaction.created_at.desc())
        .limit(1)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return await session.scalar(stmt)


async def list_for_sale(session: AsyncSession, sale_id: uuid.UUID) -> Sequence[VirtualTransaction]:
    result = await session.execute(
        select(VirtualTransaction)
        .where(VirtualTransaction.sale_id == sale_id)
        .order_by(VirtualTransaction.created_at.asc())
    )
    return result.scalars().all()
