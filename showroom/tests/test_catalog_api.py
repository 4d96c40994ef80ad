from __future__ import annotations

from io import BytesIO

from flask.testing import FlaskClient

from conftest import RecordingAssetStore


def listing_form(model: str = "Aria", images: tuple[str, ...] = ("img1.jpg",), **overrides: str) -> dict:
    form: dict = {
        "model": model,
        "year": "2022",
        "seating": "5",
        "transmission": "Automatic",
        "description": "Comfortable family car",
        "features": "GPS, Heated seats, ,Bluetooth",
        "featured": "on",
    }
    form.update(overrides)
    if images:
        form["images"] = [(BytesIO(f"bytes-{name}".encode()), name) for name in images]
    return form


def test_public_listing_is_empty_initially(client: FlaskClient) -> None:
    response = client.get("/api/catalog")

    assert response.status_code == 200
    assert response.get_json() == []


def test_create_returns_item_with_wire_fields(
    admin_client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    response = admin_client.post(
        "/api/catalog",
        data=listing_form(images=("img1.jpg", "img2.jpg")),
        content_type="multipart/form-data",
    )

    assert response.status_code == 201
    item = response.get_json()
    assert item["id"] == 1
    assert item["model"] == "Aria"
    assert item["year"] == 2022
    assert item["seating"] == 5
    assert item["features"] == ["GPS", "Heated seats", "Bluetooth"]
    assert item["featured"] is True
    assert sorted(item["images"]) == sorted(asset_store.uploaded)
    assert admin_client.get("/api/catalog/1").get_json() == item


def test_seating_capacity_alias_is_accepted(admin_client: FlaskClient) -> None:
    form = listing_form(featured="false")
    form["seatingCapacity"] = form.pop("seating")

    response = admin_client.post("/api/catalog", data=form, content_type="multipart/form-data")

    assert response.status_code == 201
    assert response.get_json()["seating"] == 5
    assert response.get_json()["featured"] is False


def test_create_requires_session_and_has_no_side_effects(
    client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    response = client.post("/api/catalog", data=listing_form(), content_type="multipart/form-data")

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"
    assert asset_store.uploaded == []
    assert client.get("/api/catalog").get_json() == []


def test_forged_token_is_forbidden(client: FlaskClient, asset_store: RecordingAssetStore) -> None:
    client.set_cookie("token", "forged.value")

    response = client.post("/api/catalog", data=listing_form(), content_type="multipart/form-data")

    assert response.status_code == 403
    assert response.get_json()["error"] == "invalid_token"
    assert asset_store.uploaded == []


def test_create_with_bad_fields_is_rejected(
    admin_client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    response = admin_client.post(
        "/api/catalog",
        data=listing_form(year="next year", model=""),
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert {"year", "model"} <= set(payload["context"]["fields"])
    assert asset_store.uploaded == []


def test_create_without_images_is_rejected(admin_client: FlaskClient) -> None:
    response = admin_client.post(
        "/api/catalog", data=listing_form(images=()), content_type="multipart/form-data"
    )

    assert response.status_code == 400
    assert response.get_json()["context"]["fields"] == ["images"]


def test_update_and_delete_flow(admin_client: FlaskClient, asset_store: RecordingAssetStore) -> None:
    first = admin_client.post(
        "/api/catalog",
        data=listing_form("Aria", images=("img1.jpg", "img2.jpg")),
        content_type="multipart/form-data",
    ).get_json()
    second = admin_client.post(
        "/api/catalog", data=listing_form("Brio"), content_type="multipart/form-data"
    ).get_json()
    assert second["id"] == 2

    updated = admin_client.put(
        "/api/catalog/1",
        data=listing_form("Aria", images=("img3.jpg",)),
        content_type="multipart/form-data",
    )
    assert updated.status_code == 200
    assert len(updated.get_json()["images"]) == 1
    assert sorted(asset_store.deleted) == sorted(first["images"])

    deleted = admin_client.delete("/api/catalog/2")
    assert deleted.status_code == 200
    assert deleted.get_json()["id"] == 2
    assert [item["id"] for item in admin_client.get("/api/catalog").get_json()] == [1]
    assert set(second["images"]) <= set(asset_store.deleted)


def test_update_without_images_keeps_existing(
    admin_client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    created = admin_client.post(
        "/api/catalog", data=listing_form(), content_type="multipart/form-data"
    ).get_json()

    response = admin_client.put(
        f"/api/catalog/{created['id']}",
        data=listing_form("Aria Sport", images=(), year="2024"),
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["images"] == created["images"]
    assert body["model"] == "Aria Sport"
    assert body["year"] == 2024
    assert asset_store.deleted == []


def test_update_missing_item_is_not_found_before_validation(admin_client: FlaskClient) -> None:
    response = admin_client.put(
        "/api/catalog/99", data={"model": ""}, content_type="multipart/form-data"
    )

    assert response.status_code == 404
    assert response.get_json() == {"error": "item_not_found", "context": {"item_id": 99}}


def test_get_and_delete_missing_item(admin_client: FlaskClient) -> None:
    assert admin_client.get("/api/catalog/5").status_code == 404
    assert admin_client.delete("/api/catalog/5").status_code == 404


def test_upload_failure_is_bad_gateway(
    admin_client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    asset_store.fail_filenames = {"img1.jpg"}

    response = admin_client.post("/api/catalog", data=listing_form(), content_type="multipart/form-data")

    assert response.status_code == 502
    assert response.get_json()["error"] == "upstream_error"
    assert admin_client.get("/api/catalog").get_json() == []


def test_ids_are_not_reused_after_delete(admin_client: FlaskClient) -> None:
    for model in ("Aria", "Brio"):
        admin_client.post("/api/catalog", data=listing_form(model), content_type="multipart/form-data")
    admin_client.delete("/api/catalog/2")

    third = admin_client.post(
        "/api/catalog", data=listing_form("Cato"), content_type="multipart/form-data"
    ).get_json()

    assert third["id"] == 3


def test_health_and_metrics(client: FlaskClient) -> None:
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.get_json()["database"] == "ok"
    assert health.headers["X-Frame-Options"] == "DENY"

    metrics = client.get("/api/metrics")
    assert metrics.status_code == 200
    assert b"showroom_requests_total" in metrics.data


def test_out_of_range_numbers_are_rejected(
    admin_client: FlaskClient, asset_store: RecordingAssetStore
) -> None:
    response = admin_client.post(
        "/api/catalog",
        data=listing_form(year=str(10**30)),
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert "year" in response.get_json()["context"]["fields"]
    assert asset_store.live == set()

    created = admin_client.post("/api/catalog", data=listing_form(), content_type="multipart/form-data")
    assert created.get_json()["id"] == 1


def test_text_fields_are_limited_to_column_sizes(admin_client: FlaskClient) -> None:
    at_limit = admin_client.post(
        "/api/catalog",
        data=listing_form("M" * 128, transmission="T" * 64),
        content_type="multipart/form-data",
    )
    too_long = admin_client.post(
        "/api/catalog",
        data=listing_form("M" * 129, transmission="T" * 65),
        content_type="multipart/form-data",
    )

    assert at_limit.status_code == 201
    assert too_long.status_code == 400
    assert {"model", "transmission"} <= set(too_long.get_json()["context"]["fields"])


def test_repeated_feature_fields_are_all_kept(admin_client: FlaskClient) -> None:
    response = admin_client.post(
        "/api/catalog",
        data=listing_form(features=["GPS", "Sunroof, Bluetooth"]),
        content_type="multipart/form-data",
    )

    assert response.status_code == 201
    assert response.get_json()["features"] == ["GPS", "Sunroof", "Bluetooth"]


def test_seating_above_limit_is_rejected(admin_client: FlaskClient) -> None:
    response = admin_client.post(
        "/api/catalog", data=listing_form(seating="101"), content_type="multipart/form-data"
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"
