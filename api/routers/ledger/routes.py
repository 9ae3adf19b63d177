import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.crud import split as splits, transaction as transactions
from api.crud.account import AccountNotFound, AccountStore
from api.database import get_async_session
from .schemas import AccountRead, SplitRead, TransactionRead

router = APIRouter()
accounts = AccountStore()


@router.get("/sales/{sale_id}/splits", response_model=list[SplitRead], summary="Splits of a sale")
async def get_sale_splits(sale_id: uuid.UUID, session: AsyncSession = Depends(get_async_session)):
    return await splits.list_for_sale(session, sale_id)


@router.get("/sales/{sale_id}/transactions", response_model=list[TransactionRead], summary="Ledger entries of a sale")
async def get_sale_transactions(sale_id: uuid.UUID, session: AsyncSession = Depends(get_async_session)):
    return await transactions.list_for_sale(session, sale_id)


@router.get("/accounts/{account_id}", response_model=AccountRead, summary="Beneficiary balances")
async def get_account(account_id: uuid.UUID, session: AsyncSession = Depends(get_async_session)):
    try:
        return await accounts.get_account(session, account_id)
    except AccountNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
