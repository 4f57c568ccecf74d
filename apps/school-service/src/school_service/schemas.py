from __future__ import annotations

from geo_engine.models import MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, MIN_LONGITUDE
from pydantic import BaseModel, Field, field_validator

from shared.security import clean_text

MAX_TEXT_LENGTH = 255


class SchoolCreateRequest(BaseModel):
    name: str
    address: str
    latitude: float = Field(ge=MIN_LATITUDE, le=MAX_LATITUDE, allow_inf_nan=False)
    longitude: float = Field(ge=MIN_LONGITUDE, le=MAX_LONGITUDE, allow_inf_nan=False)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _reject_boolean(cls, value: object) -> object:
        # bool is an int subclass and lax float parsing would store true as 1.0.
        if isinstance(value, bool):
            raise ValueError("must be a number")
        return value

    @field_validator("name", "address")
    @classmethod
    def _clean_required_text(cls, value: str) -> str:
        cleaned = clean_text(value)
        if not cleaned:
            raise ValueError("must not be empty")
        if len(cleaned) > MAX_TEXT_LENGTH:
            raise ValueError(f"must be at most {MAX_TEXT_LENGTH} characters")
        return cleaned


class SchoolCreated(BaseModel):
    success: bool = True
    message: str = "School added successfully"
    schoolId: int


class RankedSchool(BaseModel):
    id: int
    name: str
    address: str
    latitude: float
    longitude: float
    created_at: str | None
    distance: float


class SchoolList(BaseModel):
    success: bool = True
    schools: list[RankedSchool]
