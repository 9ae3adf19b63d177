from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.database import get_async_session
from .service import SplitPoster

def get_split_poster(session: AsyncSession = Depends(get_async_session)) -> SplitPoster:
    return SplitPoster(session)
