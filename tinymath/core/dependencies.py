from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.config import settings
from tinymath.core.security import decode_token
from tinymath.database import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def get_current_account(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Resolve the bearer token from the Authorization header to an Account.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or
            the account no longer exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(token)
        account_id: str | None = payload.get("sub")
        token_type: str | None = payload.get("type")
        if account_id is None or token_type != "access":
            raise credentials_exception
        account_uuid = UUID(account_id)
    except (JWTError, ValueError):
        raise credentials_exception

    # Import here to avoid circular imports (models -> database -> dependencies)
    from tinymath.models.account import Account

    account = await db.get(Account, account_uuid)
    if account is None:
        raise credentials_exception

    return account
