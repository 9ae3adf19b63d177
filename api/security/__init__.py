import secrets

from fastapi import Header, HTTPException, status
from config import ENV

API_KEY = ENV().SERVICE_API_TOKEN


async def require_service_key(x_api_key: str | None = Header(None)) -> bool:
    """Gateway adapters and internal services authenticate with the shared service token."""
    if not API_KEY:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Service token not configured")
    if not x_api_key or not secrets.compare_digest(x_api_key.encode(), API_KEY.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid service key")
    return True
