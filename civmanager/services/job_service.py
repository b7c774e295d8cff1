"""Job catalog access and the job eligibility rules."""

from typing import NamedTuple, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.models.job import Job


class HasStats(Protocol):
    strength: int
    intelligence: int
    charisma: int


class CharacterStats(NamedTuple):
    strength: int
    intelligence: int
    charisma: int


def is_eligible(stats: HasStats, job: Job) -> bool:
    """All three minimums must be met; there is no partial credit."""
    return (
        stats.strength >= job.min_strength
        and stats.intelligence >= job.min_intelligence
        and stats.charisma >= job.min_charisma
    )


def compatible_jobs(stats: HasStats, jobs: Sequence[Job]) -> list[Job]:
    """Jobs the stats qualify for, in the order they were given."""
    return [job for job in jobs if is_eligible(stats, job)]


async def list_jobs(db: AsyncSession) -> list[Job]:
    result = await db.execute(select(Job).order_by(Job.name))
    return list(result.scalars().all())


async def get_job(db: AsyncSession, job_id: int) -> Job | None:
    result = await db.execute(select(Job).where(Job.id == job_id))
    return result.scalar_one_or_none()
