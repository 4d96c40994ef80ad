from __future__ import annotations

import pytest

from conftest import (
    InMemoryCatalogRepository,
    RecordingAssetStore,
    make_fields,
    make_image,
)
from showroom.application.services.catalog_service import CatalogService
from showroom.domain.catalog.exceptions import NotFoundError
from showroom.shared.errors import PersistenceError, UpstreamError, ValidationError


@pytest.fixture()
def repo() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture()
def service(repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore) -> CatalogService:
    return CatalogService(items=repo, assets=asset_store, max_images=3, upload_workers=2)


def test_create_assigns_sequential_ids(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    first = service.create(make_fields("Aria"), [make_image("img1"), make_image("img2")])
    second = service.create(make_fields("Brio"), [make_image("img3")])

    assert first.id == 1
    assert second.id == 2
    assert len(first.images) == 2
    assert second.images == (asset_store.uploaded[-1],)
    assert set(first.images) | set(second.images) == set(asset_store.uploaded)


def test_create_result_order_matches_input_order(asset_store: RecordingAssetStore) -> None:
    urls_by_name: dict[str, str] = {}
    original_upload = asset_store.upload

    def upload(data: bytes, filename: str | None = None) -> str:
        url = original_upload(data, filename)
        urls_by_name[filename or ""] = url
        return url

    asset_store.upload = upload  # type: ignore[method-assign]
    service = CatalogService(
        items=InMemoryCatalogRepository(), assets=asset_store, max_images=5, upload_workers=4
    )

    names = ["front", "side", "rear", "interior"]
    item = service.create(make_fields(), [make_image(name) for name in names])

    assert list(item.images) == [urls_by_name[name] for name in names]


def test_create_without_images_is_rejected_without_side_effects(
    service: CatalogService, repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        service.create(make_fields(), [])

    assert exc_info.value.context["fields"] == ["images"]
    assert repo.list_all() == []
    assert asset_store.uploaded == []
    assert repo.next_id() == 1


def test_create_with_too_many_images_is_rejected(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    images = [make_image(f"img{i}") for i in range(4)]

    with pytest.raises(ValidationError):
        service.create(make_fields(), images)

    assert asset_store.uploaded == []


def test_partial_policy_drops_failed_images(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    asset_store.fail_filenames = {"broken"}

    item = service.create(make_fields(), [make_image("ok1"), make_image("broken"), make_image("ok2")])

    assert len(item.images) == 2
    assert asset_store.deleted == []


def test_create_fails_when_no_image_survives(
    service: CatalogService, repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore
) -> None:
    asset_store.fail_filenames = {"a", "b"}

    with pytest.raises(UpstreamError) as exc_info:
        service.create(make_fields(), [make_image("a"), make_image("b")])

    assert exc_info.value.context["failed_images"] == [0, 1]
    assert repo.list_all() == []


def test_strict_policy_discards_successful_uploads(
    repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore
) -> None:
    service = CatalogService(items=repo, assets=asset_store, upload_policy="strict")
    asset_store.fail_filenames = {"broken"}

    with pytest.raises(UpstreamError):
        service.create(make_fields(), [make_image("ok"), make_image("broken")])

    assert len(asset_store.uploaded) == 1
    assert asset_store.deleted == asset_store.uploaded
    assert repo.list_all() == []


def test_create_discards_uploads_when_record_write_fails(
    service: CatalogService, repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore
) -> None:
    repo.fail_writes = True

    with pytest.raises(PersistenceError):
        service.create(make_fields(), [make_image("img1"), make_image("img2")])

    assert sorted(asset_store.deleted) == sorted(asset_store.uploaded)
    assert asset_store.live == set()


def test_update_replaces_images_and_deletes_old_ones(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    original = service.create(make_fields("Aria"), [make_image("img1"), make_image("img2")])

    updated = service.update(1, make_fields("Aria II"), [make_image("img3")])

    assert updated.id == original.id
    assert updated.fields.model == "Aria II"
    assert len(updated.images) == 1
    assert updated.images[0] not in original.images
    assert sorted(asset_store.deleted) == sorted(original.images)
    assert asset_store.live == set(updated.images)


def test_update_without_images_leaves_images_identical(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    original = service.create(make_fields(), [make_image("img1"), make_image("img2")])

    updated = service.update(original.id, make_fields(year=2024, featured=True), None)
    again = service.update(original.id, make_fields(year=2025), [])

    assert updated.images == original.images
    assert again.images == original.images
    assert again.fields.year == 2025
    assert asset_store.deleted == []


def test_update_missing_item_raises_not_found(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    with pytest.raises(NotFoundError):
        service.update(42, make_fields(), [make_image("img1")])

    assert asset_store.uploaded == []


def test_update_persist_failure_keeps_previous_images(
    service: CatalogService, repo: InMemoryCatalogRepository, asset_store: RecordingAssetStore
) -> None:
    original = service.create(make_fields(), [make_image("img1")])
    repo.fail_writes = True

    with pytest.raises(PersistenceError):
        service.update(original.id, make_fields("Changed"), [make_image("img2")])

    stored = service.get(original.id)
    assert stored.images == original.images
    assert stored.fields.model == "Aria"
    assert set(original.images) <= asset_store.live
    assert asset_store.deleted == [asset_store.uploaded[-1]]


def test_update_with_no_surviving_upload_leaves_record_untouched(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    original = service.create(make_fields(), [make_image("img1")])
    asset_store.fail_filenames = {"bad"}

    with pytest.raises(UpstreamError):
        service.update(original.id, make_fields("Changed"), [make_image("bad")])

    assert service.get(original.id) == original
    assert asset_store.deleted == []


def test_delete_removes_record_then_assets(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    first = service.create(make_fields("Aria"), [make_image("img1")])
    second = service.create(make_fields("Brio"), [make_image("img2")])

    deleted = service.delete(second.id)

    assert deleted == second
    assert [item.id for item in service.list_items()] == [first.id]
    assert asset_store.deleted == list(second.images)
    with pytest.raises(NotFoundError):
        service.get(second.id)


def test_delete_missing_item_raises_not_found(service: CatalogService) -> None:
    with pytest.raises(NotFoundError):
        service.delete(7)


def test_ids_are_not_reused_after_delete(service: CatalogService) -> None:
    service.create(make_fields("Aria"), [make_image("img1")])
    second = service.create(make_fields("Brio"), [make_image("img2")])
    service.delete(second.id)

    third = service.create(make_fields("Cato"), [make_image("img3")])

    assert third.id == 3


def test_list_items_is_newest_first(service: CatalogService) -> None:
    for name in ("Aria", "Brio", "Cato"):
        service.create(make_fields(name), [make_image(name)])

    assert [item.fields.model for item in service.list_items()] == ["Cato", "Brio", "Aria"]


def test_asset_delete_errors_never_propagate(
    service: CatalogService, asset_store: RecordingAssetStore
) -> None:
    item = service.create(make_fields(), [make_image("img1")])

    def failing_delete(url: str) -> None:
        raise RuntimeError("storage offline")

    asset_store.delete = failing_delete  # type: ignore[method-assign]

    assert service.delete(item.id) == item
    assert service.list_items() == []
