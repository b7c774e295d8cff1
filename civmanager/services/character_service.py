"""Characters of a civilization and their job assignments.

Jobs are unlimited-capacity categories: any number of characters may hold the
same job, and assigning or deleting a character never touches the catalog or
the resource ledger.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.errors import InvalidOperation, NotEligible, NotFound
from civmanager.models.character import DEFAULT_STAT, Character
from civmanager.services.job_service import get_job, is_eligible

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "age", "strength", "intelligence", "charisma", "experience", "loyalty"}
)


async def create_character(
    db: AsyncSession,
    civilization_id: int,
    name: str,
    strength: int = DEFAULT_STAT,
    intelligence: int = DEFAULT_STAT,
    charisma: int = DEFAULT_STAT,
    age: int = 18,
) -> Character:
    character = Character(
        civilization_id=civilization_id,
        name=name,
        age=age,
        strength=strength,
        intelligence=intelligence,
        charisma=charisma,
    )
    db.add(character)
    await db.commit()
    await db.refresh(character)
    return character


async def list_characters(db: AsyncSession, civilization_id: int) -> list[Character]:
    result = await db.execute(
        select(Character)
        .where(Character.civilization_id == civilization_id)
        .order_by(Character.name)
    )
    return list(result.scalars().all())


async def get_character(db: AsyncSession, character_id: int) -> Character | None:
    result = await db.execute(select(Character).where(Character.id == character_id))
    return result.scalar_one_or_none()


async def _require_character(db: AsyncSession, character_id: int) -> Character:
    character = await get_character(db, character_id)
    if character is None:
        raise NotFound("Character", character_id)
    return character


async def _save(db: AsyncSession, character: Character) -> Character:
    character.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(character)
    return character


async def update_character(db: AsyncSession, character_id: int, **fields) -> Character:
    """Rename, age, or grow a character's stats.

    A job already held is kept even if the new stats no longer meet its
    thresholds; eligibility is only checked when assigning.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidOperation(f"Cannot update character field(s): {', '.join(sorted(unknown))}")
    character = await _require_character(db, character_id)
    for key, value in fields.items():
        setattr(character, key, value)
    return await _save(db, character)


async def assign_job(db: AsyncSession, character_id: int, job_id: int) -> Character:
    character = await _require_character(db, character_id)
    job = await get_job(db, job_id)
    if job is None:
        raise NotFound("Job", job_id)
    if not is_eligible(character, job):
        raise NotEligible(character.id, job.id)
    character.job_id = job.id
    logger.info("Character %s assigned to job %s", character.id, job.name)
    return await _save(db, character)


async def unassign_job(db: AsyncSession, character_id: int) -> Character:
    """Make a character idle. Always allowed, whatever its stats."""
    character = await _require_character(db, character_id)
    character.job_id = None
    return await _save(db, character)


async def delete_character(db: AsyncSession, character_id: int) -> None:
    character = await _require_character(db, character_id)
    await db.delete(character)
    await db.commit()
