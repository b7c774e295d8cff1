from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from civmanager.models.character import DEFAULT_STAT


class JobResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    min_strength: int
    min_intelligence: int
    min_charisma: int

    model_config = {"from_attributes": True}


class CharacterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    age: int = Field(default=18, ge=0)
    strength: int = DEFAULT_STAT
    intelligence: int = DEFAULT_STAT
    charisma: int = DEFAULT_STAT


class CharacterUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0)
    strength: Optional[int] = None
    intelligence: Optional[int] = None
    charisma: Optional[int] = None
    experience: Optional[int] = Field(default=None, ge=0)
    loyalty: Optional[int] = None


class JobAssignment(BaseModel):
    job_id: int


class CharacterResponse(BaseModel):
    id: int
    civilization_id: int
    name: str
    age: int
    strength: int
    intelligence: int
    charisma: int
    experience: int
    loyalty: int
    job_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CharacterDetailResponse(CharacterResponse):
    job: Optional[JobResponse] = None
    compatible_jobs: list[JobResponse] = []
