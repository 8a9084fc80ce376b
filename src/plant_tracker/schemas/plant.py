"""Pydantic schemas for plants.

Separate "Create"/"Update" schemas (input) from the "Read" schema
(output). Responses use camelCase keys via serialization aliases.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PlantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Oleander"])

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PlantRename(PlantCreate):
    """Renames are stricter than creation: 3-50 characters."""
    name: str = Field(..., min_length=3, max_length=50, examples=["Monstera"])


class PlantRead(BaseModel):
    id: uuid.UUID
    name: str
    last_watered_at: Optional[datetime] = Field(
        default=None, serialization_alias="lastWateredAt"
    )

    model_config = {"from_attributes": True}
