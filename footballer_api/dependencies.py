"""
Request-scoped dependencies: database session, data-access models and the
write-endpoint API key check.
"""

import secrets
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from footballer_api.config import settings
from footballer_api.database import async_session_factory
from footballer_api.services import Models


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the response is done."""
    async with async_session_factory() as session:
        yield session


async def get_models(db: AsyncSession = Depends(get_db)) -> Models:
    return Models(db)


async def get_admin_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> str:
    """401 without X-API-Key, 403 when it does not match ADMIN_API_KEY."""
    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing API key header (X-API-Key)"
        )

    if not secrets.compare_digest(x_api_key, settings.admin_api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="invalid API key"
        )

    return x_api_key
