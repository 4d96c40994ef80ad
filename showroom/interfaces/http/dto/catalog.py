from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field, field_validator

from showroom.domain.catalog.entities import (
    MODEL_MAX_LENGTH,
    SEATING_CAPACITY_MAX,
    TRANSMISSION_MAX_LENGTH,
    YEAR_MAX,
    ListingFields,
)

_TRUTHY = {"true", "1", "on", "yes"}


class ListingFormDTO(BaseModel):
    """Listing fields as posted by the dashboard's multipart form."""

    model: str = Field(min_length=1, max_length=MODEL_MAX_LENGTH)
    year: int = Field(gt=0, le=YEAR_MAX)
    seating_capacity: int = Field(
        gt=0, le=SEATING_CAPACITY_MAX, validation_alias=AliasChoices("seating", "seatingCapacity")
    )
    transmission: str = Field(min_length=1, max_length=TRANSMISSION_MAX_LENGTH)
    description: str = Field(min_length=1)
    features: list[str] = Field(default_factory=list)
    featured: bool = False

    @field_validator("model", "transmission", "description", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("features", mode="before")
    @classmethod
    def split_features(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list | tuple):
            # Repeated fields and comma-separated values both work.
            parts = (part.strip() for item in value for part in str(item).split(","))
            return [part for part in parts if part]
        return value

    @field_validator("featured", mode="before")
    @classmethod
    def parse_featured(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return value

    def to_fields(self) -> ListingFields:
        return ListingFields(
            model=self.model,
            year=self.year,
            seating_capacity=self.seating_capacity,
            transmission=self.transmission,
            description=self.description,
            features=tuple(self.features),
            featured=self.featured,
        )
