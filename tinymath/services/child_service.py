"""Child Service.

Child sub-profiles owned by a parent account, with game progress.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.core.errors import NotFoundError
from tinymath.models.account import Account
from tinymath.models.child import ChildProfile

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = ("stars", "current_level", "high_score")


def initial_level_for_age(age: int) -> int:
    """Starting difficulty: under 3 -> 1, 3-4 -> 2, 5 and up -> 3."""
    if age < 3:
        return 1
    if age <= 4:
        return 2
    return 3


async def add_child(
    db: AsyncSession, *, parent_id: uuid.UUID, name: str, age: int,
) -> ChildProfile:
    """Create a child profile with its level derived from ``age``."""
    if await db.get(Account, parent_id) is None:
        raise NotFoundError("User not found")

    child = ChildProfile(
        parent_id=parent_id,
        name=name,
        age=age,
        current_level=initial_level_for_age(age),
        stars=0,
        high_score=0,
    )
    db.add(child)
    await db.flush()
    await db.refresh(child)
    logger.info("Added child %s to account %s (level %d)", child.id, parent_id, child.current_level)
    return child


async def list_children(db: AsyncSession, parent_id: uuid.UUID) -> list[ChildProfile]:
    result = await db.execute(
        select(ChildProfile)
        .where(ChildProfile.parent_id == parent_id)
        .order_by(ChildProfile.created_at, ChildProfile.name)
    )
    return list(result.scalars().all())


async def get_child(db: AsyncSession, child_id: uuid.UUID) -> ChildProfile:
    child = await db.get(ChildProfile, child_id)
    if child is None:
        raise NotFoundError("Child not found")
    return child


async def update_child_progress(
    db: AsyncSession, child_id: uuid.UUID, values: dict,
) -> ChildProfile:
    """Write only the progress fields present in ``values``.

    A missing ``high_score`` keeps the stored one.
    """
    child = await get_child(db, child_id)
    for field, value in values.items():
        if field in PROGRESS_FIELDS and value is not None:
            setattr(child, field, value)
    await db.flush()
    await db.refresh(child)
    return child


async def delete_child(db: AsyncSession, child_id: uuid.UUID) -> None:
    child = await get_child(db, child_id)
    await db.delete(child)
    await db.flush()
    logger.info("Deleted child %s", child_id)
