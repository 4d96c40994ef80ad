from __future__ import annotations

import pytest

from conftest import make_fields
from showroom.domain.admin.entities import AdminCredential
from showroom.domain.catalog.entities import CatalogItem, ImageUpload
from showroom.domain.exceptions import InvariantViolation


def test_listing_fields_reject_blank_text() -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        make_fields(model="   ")

    assert exc_info.value.field == "model"


@pytest.mark.parametrize("field", ["year", "seating_capacity"])
def test_listing_fields_reject_non_positive_numbers(field: str) -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        make_fields(**{field: 0})

    assert exc_info.value.field == field


@pytest.mark.parametrize(
    ("field", "value"),
    [("year", 10_000), ("seating_capacity", 101), ("model", "M" * 129), ("transmission", "T" * 65)],
)
def test_listing_fields_reject_values_beyond_storage_limits(field: str, value: object) -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        make_fields(**{field: value})

    assert exc_info.value.field == field


def test_catalog_item_serializes_with_wire_names() -> None:
    item = CatalogItem(id=3, fields=make_fields(featured=True), images=["u1", "u2"])

    assert item.to_dict() == {
        "id": 3,
        "model": "Aria",
        "year": 2022,
        "seating": 5,
        "transmission": "Automatic",
        "description": "Comfortable family car",
        "features": ["GPS", "Heated seats"],
        "images": ["u1", "u2"],
        "featured": True,
    }
    assert item.images == ("u1", "u2")


def test_with_images_keeps_fields() -> None:
    item = CatalogItem(id=1, fields=make_fields(), images=("old",))

    replaced = item.with_images(["new"])

    assert replaced.images == ("new",)
    assert replaced.fields == item.fields
    assert item.images == ("old",)


def test_empty_image_upload_is_invalid() -> None:
    with pytest.raises(InvariantViolation):
        ImageUpload(data=b"")


def test_admin_credential_requires_values() -> None:
    with pytest.raises(InvariantViolation):
        AdminCredential(username="", password_hash="h")
