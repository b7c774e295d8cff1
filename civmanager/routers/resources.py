from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.dependencies import get_current_civilization
from civmanager.errors import GameError
from civmanager.http_errors import http_error
from civmanager.models.civilization import Civilization
from civmanager.schemas.civilization import ResourceAdjustment, ResourceChange, ResourcesResponse
from civmanager.services.resource_service import (
    add_resource,
    adjust_resources,
    consume_resource,
    get_resources,
)

router = APIRouter(prefix="/civilization/resources", tags=["resources"])


@router.get("", response_model=ResourcesResponse)
async def get_balance(
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    resources = await get_resources(civilization.id, db)
    if resources is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resources not found")
    return resources


@router.post("/add", response_model=ResourcesResponse)
async def add(
    body: ResourceChange,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    try:
        return await add_resource(civilization.id, body.resource, body.amount, db)
    except GameError as e:
        raise http_error(e)


@router.post("/consume", response_model=ResourcesResponse)
async def consume(
    body: ResourceChange,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    try:
        return await consume_resource(civilization.id, body.resource, body.amount, db)
    except GameError as e:
        raise http_error(e)


@router.post("/adjust", response_model=ResourcesResponse)
async def adjust(
    body: ResourceAdjustment,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    try:
        return await adjust_resources(civilization.id, body.deltas, db)
    except GameError as e:
        raise http_error(e)
