# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Catalog entities: vehicle listings and the images uploaded with them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from showroom.domain.exceptions import InvariantViolation

MODEL_MAX_LENGTH = 128
TRANSMISSION_MAX_LENGTH = 64
YEAR_MAX = 9999
SEATING_CAPACITY_MAX = 100


@dataclass(slots=True, frozen=True)
class ListingFields:
    """Everything an administrator edits on a listing, apart from its images."""

    model: str
    year: int
    seating_capacity: int
    transmission: str
    description: str
    features: tuple[str, ...] = ()
    featured: bool = False

    def __post_init__(self) -> None:
        for name in ("model", "transmission", "description"):
            if not getattr(self, name).strip():
                raise InvariantViolation("must not be blank", field=name)
        if len(self.model) > MODEL_MAX_LENGTH:
            raise InvariantViolation(f"at most {MODEL_MAX_LENGTH} characters", field="model")
        if len(self.transmission) > TRANSMISSION_MAX_LENGTH:
            raise InvariantViolation(f"at most {TRANSMISSION_MAX_LENGTH} characters", field="transmission")
        if not 0 < self.year <= YEAR_MAX:
            raise InvariantViolation(f"year must be between 1 and {YEAR_MAX}", field="year")
        if not 0 < self.seating_capacity <= SEATING_CAPACITY_MAX:
            raise InvariantViolation(
                f"seating capacity must be between 1 and {SEATING_CAPACITY_MAX}", field="seating_capacity"
            )
        object.__setattr__(self, "features", tuple(self.features))


@dataclass(slots=True, frozen=True)
class CatalogItem:
    """A published vehicle listing. ``images[0]`` is the display image."""

    id: int
    fields: ListingFields
    images: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise InvariantViolation("id must be positive", field="id")
        object.__setattr__(self, "images", tuple(self.images))

    def with_fields(self, fields: ListingFields) -> CatalogItem:
        return replace(self, fields=fields)

    def with_images(self, images: tuple[str, ...] | list[str]) -> CatalogItem:
        return replace(self, images=tuple(images))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "model": self.fields.model,
            "year": self.fields.year,
            "seating": self.fields.seating_capacity,
            "transmission": self.fields.transmission,
            "description": self.fields.description,
            "features": list(self.fields.features),
            "images": list(self.images),
            "featured": self.fields.featured,
        }


@dataclass(slots=True, frozen=True)
class ImageUpload:
    data: bytes
    filename: str | None = None
    content_type: str | None = None

    def __post_init__(self) -> None:
        if not self.data:
            raise InvariantViolation("image must not be empty", field="images")
