import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .interface import AccountInterface
from api.crud.dialect import conflict_insert
from api.models import AccountType, BalanceBucket, Organization, VirtualAccount


class AccountNotFound(Exception): ...


class AccountStore(AccountInterface):
    """
    Beneficiary balances. Balances are only ever changed through relative
    UPDATE statements so concurrent postings for one account never lose writes.
    Methods do not commit; the caller owns the unit of work.
    """

    async def get_or_create_account(
        self,
        session: AsyncSession,
        organization_id: uuid.UUID,
        role: AccountType,
        owner_key: str = "",
        holder_name: Optional[str] = None,
        holder_email: Optional[str] = None,
    ) -> VirtualAccount:
        lookup = select(VirtualAccount).where(
            VirtualAccount.organization_id == organization_id,
            VirtualAccount.account_type == role,
            VirtualAccount.owner_key == owner_key,
        )
        account = await session.scalar(lookup)
        if account:
            return account

        if holder_name is None or holder_email is None:
            org = await session.get(Organization, organization_id)
            holder_name = holder_name or (org.name if org else role.value.capitalize())
            holder_email = holder_email or (org.owner_email if org else None)

        stmt = (
            conflict_insert(session, VirtualAccount)
            .values(
                id=uuid.uuid4(),
                organization_id=organization_id,
                account_type=role,
                owner_key=owner_key,
                holder_name=holder_name,
                holder_email=holder_email,
                balance_cents=0,
                pending_balance_cents=0,
                total_received_cents=0,
            )
            .on_conflict_do_nothing(index_elements=["organization_id", "account_type", "owner_key"])
        )
        await session.execute(stmt)
        # a concurrent request may have won the insert, read back whichever row exists
        return await session.scalar(lookup.execution_options(populate_existing=True))

    async def adjust_balance(
        self,
        session: AsyncSession,
        account_id: uuid.UUID,
        bucket: BalanceBucket,
        delta_cents: int,
        received_cents: int = 0,
    ) -> VirtualAccount:
        column = VirtualAccount.pending_balance_cents if bucket == BalanceBucket.pending else VirtualAccount.balance_cents
        values = {column.key: column + delta_cents}
        if received_cents:
            values["total_received_cents"] = VirtualAccount.total_received_cents + received_cents

        stmt = (
            update(VirtualAccount)
            .where(VirtualAccount.id == account_id)
            .values(**values)
            .returning(VirtualAccount)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    async def move_between_buckets(self, session: AsyncSession, account_id: uuid.UUID, amount_cents: int) -> VirtualAccount:
        """Pending -> available, in one statement."""
        stmt = (
            update(VirtualAccount)
            .where(VirtualAccount.id == account_id)
            .values(
                pending_balance_cents=VirtualAccount.pending_balance_cents - amount_cents,
                balance_cents=VirtualAccount.balance_cents + amount_cents,
            )
            .returning(VirtualAccount)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    async def get_account(self, session: AsyncSession, account_id: uuid.UUID) -> VirtualAccount:
        account = await session.get(VirtualAccount, account_id, populate_existing=True)
        if not account:
            raise AccountNotFound(f"Account {account_id} not found")
        return account
