"""Children router.

Endpoints for managing a parent's child profiles and their progress.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.core.errors import parse_identifier
from tinymath.database import get_db
from tinymath.schemas.child import ChildCreate, ChildProgressUpdate, ChildResponse
from tinymath.schemas.common import MessageResponse
from tinymath.services import child_service

router = APIRouter(prefix="/auth", tags=["Children"])


@router.post("/add-child", response_model=ChildResponse, status_code=status.HTTP_201_CREATED)
async def add_child(
    body: ChildCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Add a child; the starting level is picked from the child's age."""
    return await child_service.add_child(
        db, parent_id=body.parent_id, name=body.name, age=body.age,
    )


@router.get("/children/{parent_id}", response_model=list[ChildResponse])
async def list_children(
    parent_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List all children of a parent account."""
    return await child_service.list_children(db, parse_identifier(parent_id))


@router.put("/update-child-progress", response_model=ChildResponse)
async def update_child_progress(
    body: ChildProgressUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Store a child's progress. ``highScore`` is only written when sent."""
    return await child_service.update_child_progress(
        db, body.id, body.model_dump(exclude_none=True, exclude={"id"}),
    )


@router.delete("/child/{child_id}", response_model=MessageResponse)
async def delete_child(
    child_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Remove a child profile."""
    await child_service.delete_child(db, parse_identifier(child_id, "Invalid child ID"))
    return MessageResponse(message="Child profile deleted successfully")
