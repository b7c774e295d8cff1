from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.dependencies import get_session_identity
from civmanager.schemas.civilization import SessionStateResponse
from civmanager.services.lifecycle import resolve_state

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionStateResponse)
async def get_session_state(
    db: AsyncSession = Depends(get_db),
    identity=Depends(get_session_identity),
):
    """Screen the caller should be shown: login, reset-password, setup or game."""
    user, recovering = identity
    state, civilization = await resolve_state(db, user, recovering=recovering)
    return SessionStateResponse(
        state=state.value,
        civilization_id=civilization.id if civilization is not None else None,
    )
