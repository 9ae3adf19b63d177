from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.database import get_async_session
from .service import ReversalService

def get_reversal_service(session: AsyncSession = Depends(get_async_session)) -> ReversalService:
    return ReversalService(session)
