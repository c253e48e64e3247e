"""Profile router.

Parent profile lookup and updates, and the parent's own game progress.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.core.errors import parse_identifier
from tinymath.database import get_db
from tinymath.schemas.account import (
    AccountResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    ProgressUpdate,
)
from tinymath.services import account_service

router = APIRouter(prefix="/auth", tags=["Profile"])


@router.put("/update-profile", response_model=ProfileUpdateResponse)
async def update_profile(
    body: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update the optional profile fields that are present in the body."""
    account = await account_service.update_profile(
        db, body.id, body.model_dump(exclude_unset=True, exclude={"id"}),
    )
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=AccountResponse.model_validate(account),
    )


@router.get("/user/{account_id}", response_model=AccountResponse)
async def get_user(
    account_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a parent's profile. Malformed ids are rejected before any query."""
    return await account_service.get_account(db, parse_identifier(account_id))


@router.put("/update-progress", response_model=AccountResponse)
async def update_progress(
    body: ProgressUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Store the parent's stars and current level."""
    return await account_service.update_progress(
        db, body.id, body.model_dump(exclude_none=True, exclude={"id"}),
    )
