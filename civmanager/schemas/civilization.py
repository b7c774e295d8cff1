from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from civmanager.models.civilization_resources import MAX_RESOURCE_VALUE

ResourceName = Literal["food", "gold", "materials", "military_power"]


class CivilizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class CivilizationRename(CivilizationCreate):
    pass


class CivilizationResponse(BaseModel):
    id: int
    user_id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResourcesResponse(BaseModel):
    civilization_id: int
    food: int
    gold: int
    materials: int
    military_power: int
    updated_at: datetime

    model_config = {"from_attributes": True}


class FoundingResponse(BaseModel):
    civilization: CivilizationResponse
    resources: ResourcesResponse


class ResourceChange(BaseModel):
    resource: ResourceName
    amount: int = Field(gt=0, le=MAX_RESOURCE_VALUE)


class ResourceAdjustment(BaseModel):
    deltas: dict[
        ResourceName, Annotated[int, Field(ge=-MAX_RESOURCE_VALUE, le=MAX_RESOURCE_VALUE)]
    ]


class SessionStateResponse(BaseModel):
    state: str
    civilization_id: Optional[int] = None
