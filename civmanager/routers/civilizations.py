from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.dependencies import get_current_civilization, get_current_user
from civmanager.errors import GameError
from civmanager.http_errors import http_error
from civmanager.models.civilization import Civilization
from civmanager.models.user import User
from civmanager.schemas.civilization import (
    CivilizationCreate,
    CivilizationRename,
    CivilizationResponse,
    FoundingResponse,
    ResourcesResponse,
)
from civmanager.services.civilization_service import found_civilization, rename_civilization

router = APIRouter(prefix="/civilization", tags=["civilization"])


@router.get("", response_model=CivilizationResponse)
async def get_my_civilization(civilization: Civilization = Depends(get_current_civilization)):
    return civilization


@router.post("", response_model=FoundingResponse, status_code=status.HTTP_201_CREATED)
async def found(
    body: CivilizationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        civilization, resources = await found_civilization(db, user=current_user, name=body.name)
    except GameError as e:
        raise http_error(e)
    return FoundingResponse(
        civilization=CivilizationResponse.model_validate(civilization),
        resources=ResourcesResponse.model_validate(resources),
    )


@router.patch("", response_model=CivilizationResponse)
async def rename(
    body: CivilizationRename,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    try:
        return await rename_civilization(db, civilization, body.name)
    except GameError as e:
        raise http_error(e)
