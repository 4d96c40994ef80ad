# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .entities import CatalogItem


class CatalogRepository(Protocol):
    def next_id(self) -> int:
        """Reserve a fresh identifier. Never returns the same value twice."""
        ...

    def add(self, item: CatalogItem) -> CatalogItem: ...
    def get(self, item_id: int) -> CatalogItem | None: ...
    def list_all(self) -> Sequence[CatalogItem]: ...
    def save(self, item: CatalogItem) -> CatalogItem: ...
    def remove(self, item_id: int) -> bool: ...


class AssetStore(Protocol):
    def upload(self, data: bytes, filename: str | None = None) -> str:
        """Store one object and return its permanent public URL.

        Raises UpstreamError when the backend rejects or times out.
        """
        ...

    def delete(self, url: str) -> None:
        """Best-effort removal. Never raises; unknown URLs are ignored."""
        ...
