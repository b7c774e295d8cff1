from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.database import get_db
from civmanager.schemas.character import JobResponse
from civmanager.services.job_service import get_job, list_jobs

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[JobResponse])
async def get_catalog(db: AsyncSession = Depends(get_db)):
    return await list_jobs(db)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job_info(job_id: int, db: AsyncSession = Depends(get_db)):
    job = await get_job(db, job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job
