from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.dependencies import get_current_civilization
from civmanager.errors import GameError
from civmanager.http_errors import http_error
from civmanager.models.character import Character
from civmanager.models.civilization import Civilization
from civmanager.schemas.character import (
    CharacterCreate,
    CharacterDetailResponse,
    CharacterResponse,
    CharacterUpdate,
    JobAssignment,
    JobResponse,
)
from civmanager.services.character_service import (
    assign_job,
    create_character,
    delete_character,
    get_character,
    list_characters,
    unassign_job,
    update_character,
)
from civmanager.services.job_service import compatible_jobs, list_jobs

router = APIRouter(prefix="/civilization/characters", tags=["characters"])


async def _get_own_character_or_404(
    db: AsyncSession, civilization: Civilization, character_id: int
) -> Character:
    character = await get_character(db, character_id)
    if character is None or character.civilization_id != civilization.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Character not found")
    return character


@router.get("", response_model=list[CharacterResponse])
async def list_population(
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    return await list_characters(db, civilization.id)


@router.post("", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: CharacterCreate,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    return await create_character(
        db,
        civilization_id=civilization.id,
        name=body.name,
        strength=body.strength,
        intelligence=body.intelligence,
        charisma=body.charisma,
        age=body.age,
    )


@router.get("/{character_id}", response_model=CharacterDetailResponse)
async def get_character_detail(
    character_id: int,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    character = await _get_own_character_or_404(db, civilization, character_id)
    jobs = await list_jobs(db)
    current_job = next((job for job in jobs if job.id == character.job_id), None)
    return CharacterDetailResponse(
        **CharacterResponse.model_validate(character).model_dump(),
        job=JobResponse.model_validate(current_job) if current_job else None,
        compatible_jobs=[JobResponse.model_validate(job) for job in compatible_jobs(character, jobs)],
    )


@router.patch("/{character_id}", response_model=CharacterResponse)
async def update(
    character_id: int,
    body: CharacterUpdate,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    await _get_own_character_or_404(db, civilization, character_id)
    try:
        fields = body.model_dump(exclude_unset=True, exclude_none=True)
        return await update_character(db, character_id, **fields)
    except GameError as e:
        raise http_error(e)


@router.delete("/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    character_id: int,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    await _get_own_character_or_404(db, civilization, character_id)
    try:
        await delete_character(db, character_id)
    except GameError as e:
        raise http_error(e)
    return None


@router.put("/{character_id}/job", response_model=CharacterResponse)
async def assign(
    character_id: int,
    body: JobAssignment,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    await _get_own_character_or_404(db, civilization, character_id)
    try:
        return await assign_job(db, character_id, body.job_id)
    except GameError as e:
        raise http_error(e)


@router.delete("/{character_id}/job", response_model=CharacterResponse)
async def unassign(
    character_id: int,
    db: AsyncSession = Depends(get_db),
    civilization: Civilization = Depends(get_current_civilization),
):
    await _get_own_character_or_404(db, civilization, character_id)
    try:
        return await unassign_job(db, character_id)
    except GameError as e:
        raise http_error(e)
