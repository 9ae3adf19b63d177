import uuid
from decimal import Decimal
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.crud.account import AccountStore
from api.models import (
    AccountType,
    Base,
    Organization,
    OrganizationSplitRules,
    PaymentStatus,
    Sale,
    SaleSplit,
    SplitType,
    VirtualAccount,
    VirtualTransaction,
)


class RecordingNotifier:
    """Stands in for the Celery-backed notifier; keeps every call."""

    def __init__(self):
        self.calls: List[dict] = []

    async def accounts_debited(self, *, sale_id, kind, reason, debited):
        self.calls.append({"sale_id": sale_id, "kind": kind, "reason": reason, "debited": list(debited)})


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    # let SQLAlchemy own BEGIN/SAVEPOINT instead of the sqlite3 module
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with maker() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def accounts():
    return AccountStore()


@pytest_asyncio.fixture
async def organization(session):
    org = Organization(id=uuid.uuid4(), name="Loja Azul", owner_email="owner@lojaazul.test")
    session.add(org)
    # 5% + 0, 14 days hold
    session.add(OrganizationSplitRules(
        organization_id=org.id,
        platform_fee_percent=Decimal("5.00"),
        platform_fee_fixed_cents=0,
        release_days=14,
    ))
    await session.commit()
    return org


@pytest_asyncio.fixture
async def make_sale(session, organization):
    async def _make(total_cents: int = 10_000, payment_status: PaymentStatus = PaymentStatus.pending) -> Sale:
        sale = Sale(organization_id=organization.id, total_cents=total_cents, payment_status=payment_status)
        session.add(sale)
        await session.commit()
        return sale
    return _make


@pytest_asyncio.fixture
async def attribute_split(session, organization, accounts):
    """Writes a split the way the attribution step does before the payment arrives."""
    async def _attribute(
        sale: Sale,
        split_type: SplitType,
        gross_cents: int,
        owner_key: Optional[str] = None,
        holder_name: Optional[str] = None,
        liable_for_refund: bool = False,
        liable_for_chargeback: bool = False,
    ) -> Optional[VirtualAccount]:
        account = None
        if owner_key is not None:
            account = await accounts.get_or_create_account(
                session, organization.id, AccountType(split_type.value), owner_key=owner_key, holder_name=holder_name
            )
        session.add(SaleSplit(
            sale_id=sale.id,
            virtual_account_id=account.id if account else None,
            split_type=split_type,
            gross_amount_cents=gross_cents,
            fee_cents=0,
            net_amount_cents=gross_cents,
            percentage=(Decimal(gross_cents * 100) / Decimal(sale.total_cents)).quantize(Decimal("0.0001")),
            liable_for_refund=liable_for_refund,
            liable_for_chargeback=liable_for_chargeback,
        ))
        await session.commit()
        return account
    return _attribute


@pytest_asyncio.fixture
async def attribute_affiliate(attribute_split):
    async def _attribute(
        sale: Sale,
        gross_cents: int = 1_000,
        liable_for_refund: bool = True,
        liable_for_chargeback: bool = True,
    ) -> VirtualAccount:
        return await attribute_split(
            sale,
            SplitType.affiliate,
            gross_cents,
            owner_key="aff-001",
            holder_name="Ana Afiliada",
            liable_for_refund=liable_for_refund,
            liable_for_chargeback=liable_for_chargeback,
        )
    return _attribute


async def reload(session: AsyncSession, model, pk):
    return await session.get(model, pk, populate_existing=True)


async def tenant_account(session: AsyncSession, organization_id: uuid.UUID) -> VirtualAccount:
    return await session.scalar(
        select(VirtualAccount)
        .where(VirtualAccount.organization_id == organization_id, VirtualAccount.account_type == AccountType.tenant)
        .execution_options(populate_existing=True)
    )


async def count_transactions(session: AsyncSession, sale_id: uuid.UUID) -> int:
    return await session.scalar(
        select(func.count()).select_from(VirtualTransaction).where(VirtualTransaction.sale_id == sale_id)
    )
