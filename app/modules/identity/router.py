"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.modules.identity.schemas import AccountRead
from app.modules.identity.service import get_current_user

router = APIRouter(prefix="/identity", tags=["identity"])


@router.get("/users/me", response_model=AccountRead)
async def get_me(current_user=Depends(get_current_user)) -> AccountRead:
    """Return the caller's account, role and bookability."""
    return AccountRead.from_user(current_user)
