from __future__ import annotations

import itertools
from collections.abc import Iterator, Sequence
from pathlib import Path
from threading import Lock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from showroom.app import create_app
from showroom.domain.admin.entities import AdminCredential
from showroom.domain.admin.exceptions import AlreadyExistsError
from showroom.domain.admin.repositories import CredentialRepository, PasswordHasher
from showroom.domain.catalog.entities import CatalogItem, ImageUpload, ListingFields
from showroom.domain.catalog.exceptions import NotFoundError
from showroom.domain.catalog.repositories import AssetStore, CatalogRepository
from showroom.shared.config import AppConfig
from showroom.shared.config.settings import AssetConfig, DatabaseConfig, SecurityConfig
from showroom.shared.errors import PersistenceError, UpstreamError

FAST_HASH = "pbkdf2:sha256:1000"


class RecordingAssetStore(AssetStore):
    """Hands out sequential URLs and remembers every upload and delete."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._lock = Lock()
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_filenames: set[str] = set()

    def upload(self, data: bytes, filename: str | None = None) -> str:
        if filename in self.fail_filenames:
            raise UpstreamError(context={"filename": filename})
        with self._lock:
            url = f"https://assets.test/{next(self._counter)}"
            self.uploaded.append(url)
        return url

    def delete(self, url: str) -> None:
        with self._lock:
            self.deleted.append(url)

    @property
    def live(self) -> set[str]:
        return set(self.uploaded) - set(self.deleted)


class InMemoryCatalogRepository(CatalogRepository):
    def __init__(self) -> None:
        self._items: dict[int, CatalogItem] = {}
        self._seq = 0
        self.fail_writes = False

    def next_id(self) -> int:
        self._seq += 1
        return self._seq

    def add(self, item: CatalogItem) -> CatalogItem:
        if self.fail_writes:
            raise PersistenceError(context={"operation": "catalog.add"})
        self._items[item.id] = item
        return item

    def get(self, item_id: int) -> CatalogItem | None:
        return self._items.get(item_id)

    def list_all(self) -> Sequence[CatalogItem]:
        return list(self._items.values())

    def save(self, item: CatalogItem) -> CatalogItem:
        if self.fail_writes:
            raise PersistenceError(context={"operation": "catalog.save"})
        if item.id not in self._items:
            raise NotFoundError(item.id)
        self._items[item.id] = item
        return item

    def remove(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None


class InMemoryCredentialRepository(CredentialRepository):
    def __init__(self) -> None:
        self.credential: AdminCredential | None = None

    def get(self) -> AdminCredential | None:
        return self.credential

    def add(self, credential: AdminCredential) -> AdminCredential:
        if self.credential is not None:
            raise AlreadyExistsError()
        self.credential = credential
        return credential

    def replace(self, expected_hash: str, credential: AdminCredential) -> bool:
        if self.credential is None or self.credential.password_hash != expected_hash:
            return False
        self.credential = credential
        return True


class DeterministicHasher(PasswordHasher):
    def __init__(self) -> None:
        self.verify_calls = 0

    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        self.verify_calls += 1
        return hashed == f"hashed:{password}"


def make_fields(model: str = "Aria", **overrides: object) -> ListingFields:
    values: dict[str, object] = {
        "model": model,
        "year": 2022,
        "seating_capacity": 5,
        "transmission": "Automatic",
        "description": "Comfortable family car",
        "features": ("GPS", "Heated seats"),
        "featured": False,
    }
    values.update(overrides)
    return ListingFields(**values)  # type: ignore[arg-type]


def make_image(name: str) -> ImageUpload:
    return ImageUpload(data=f"bytes-of-{name}".encode(), filename=name, content_type="image/jpeg")


def make_config(tmp_path: Path, **security: object) -> AppConfig:
    security = {"enable_rate_limit": False, "password_hash_method": FAST_HASH, **security}
    return AppConfig(
        secret_key="test-secret",
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'showroom.db'}"),
        security=SecurityConfig(**security),
        assets=AssetConfig(local_root=tmp_path / "assets"),
    )


@pytest.fixture()
def asset_store() -> RecordingAssetStore:
    return RecordingAssetStore()


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return make_config(tmp_path)


@pytest.fixture()
def app(app_config: AppConfig, asset_store: RecordingAssetStore) -> Iterator[Flask]:
    flask_app = create_app(app_config, asset_store=asset_store)
    flask_app.config.update(TESTING=True)
    yield flask_app
    flask_app.extensions["showroom"].database.dispose()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture()
def admin_client(client: FlaskClient) -> FlaskClient:
    """Client holding a valid session cookie for admin/pw1."""
    assert client.post("/api/admin/bootstrap", json={"username": "admin", "password": "pw1"}).status_code == 201
    assert client.post("/api/admin/login", json={"username": "admin", "password": "pw1"}).status_code == 200
    return client
