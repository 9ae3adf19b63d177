import uuid
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.crud.dialect import conflict_insert
from api.models import SaleSplit, SplitType, TransactionType

# factories and industries are paid before the platform fee, liable partners after it
ATTRIBUTED_SPLITS = (SplitType.factory, SplitType.industry, SplitType.coproducer, SplitType.affiliate)


async def insert_if_absent(session: AsyncSession, **values) -> Optional[uuid.UUID]:
    values.setdefault("id", uuid.uuid4())
    stmt = (
        conflict_insert(session, SaleSplit)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["sale_id", "split_type"])
        .returning(SaleSplit.id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_split(session: AsyncSession, sale_id: uuid.UUID, split_type: SplitType) -> Optional[SaleSplit]:
    return await session.scalar(
        select(SaleSplit).where(SaleSplit.sale_id == sale_id, SaleSplit.split_type == split_type)
    )


async def sale_already_split(session: AsyncSession, sale_id: uuid.UUID) -> bool:
    existing = await session.scalar(
        select(SaleSplit.id)
        .where(
            SaleSplit.sale_id == sale_id,
            SaleSplit.split_type.in_([SplitType.platform, SplitType.tenant]),
        )
        .limit(1)
    )
    return existing is not None


async def list_attributed(session: AsyncSession, sale_id: uuid.UUID) -> Sequence[SaleSplit]:
    """Third-party splits written by attribution before the payment, in the order they get paid."""
    result = await session.execute(
        select(SaleSplit)
        .where(SaleSplit.sale_id == sale_id, SaleSplit.split_type.in_(ATTRIBUTED_SPLITS))
        .execution_options(populate_existing=True)
    )
    rows = result.scalars().all()
    return sorted(rows, key=lambda row: ATTRIBUTED_SPLITS.index(row.split_type))


async def settle(
    session: AsyncSession,
    split_id: uuid.UUID,
    transaction_id: Optional[uuid.UUID],
    net_amount_cents: int,
) -> None:
    # set once; a retried posting never relinks
    await session.execute(
        update(SaleSplit)
        .where(SaleSplit.id == split_id, SaleSplit.transaction_id.is_(None))
        .values(transaction_id=transaction_id, net_amount_cents=net_amount_cents)
        .execution_options(synchronize_session=False)
    )


async def list_liable(session: AsyncSession, sale_id: uuid.UUID, kind: TransactionType) -> Sequence[SaleSplit]:
    liable_column = SaleSplit.liable_for_refund if kind == TransactionType.refund else SaleSplit.liable_for_chargeback
    result = await session.execute(
        select(SaleSplit)
        .where(SaleSplit.sale_id == sale_id, liable_column.is_(True))
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def list_for_sale(session: AsyncSession, sale_id: uuid.UUID) -> Sequence[SaleSplit]:
    result = await session.execute(
        select(SaleSplit).where(SaleSplit.sale_id == sale_id).order_by(SaleSplit.created_at.asc())
    )
    return result.scalars().all()
