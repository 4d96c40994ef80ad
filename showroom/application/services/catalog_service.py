# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Catalog mutations that keep records and hosted images consistent.

New images are always staged (uploaded) before the record that references
them is written, and images a record stops referencing are only deleted
after that write succeeded. A crash therefore never leaves a listing
pointing at a deleted image; at worst it leaves an unreferenced upload.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Literal

from showroom.domain.catalog.entities import CatalogItem, ImageUpload, ListingFields
from showroom.domain.catalog.exceptions import NotFoundError
from showroom.domain.catalog.repositories import AssetStore, CatalogRepository
from showroom.infrastructure.observability import ASSET_UPLOADS, CATALOG_MUTATIONS
from showroom.shared.errors import UpstreamError, ValidationError
from showroom.shared.logging import logger

UploadPolicy = Literal["partial", "strict"]


class CatalogService:
    def __init__(
        self,
        *,
        items: CatalogRepository,
        assets: AssetStore,
        max_images: int = 10,
        upload_workers: int = 4,
        upload_policy: UploadPolicy = "partial",
    ) -> None:
        self._items = items
        self._assets = assets
        self._max_images = max_images
        self._upload_workers = upload_workers
        self._upload_policy = upload_policy

    def list_items(self) -> list[CatalogItem]:
        return sorted(self._items.list_all(), key=lambda item: item.id, reverse=True)

    def get(self, item_id: int) -> CatalogItem:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(item_id)
        return item

    def create(self, fields: ListingFields, images: Sequence[ImageUpload]) -> CatalogItem:
        if not images:
            raise ValidationError(context={"fields": ["images"], "reason": "at least one image is required"})
        self._check_image_count(images)

        item_id = self._items.next_id()
        urls = self._upload_all(images, item_id=item_id)
        item = CatalogItem(id=item_id, fields=fields, images=tuple(urls))

        try:
            persisted = self._items.add(item)
        except Exception:
            CATALOG_MUTATIONS.labels(operation="create", outcome="error").inc()
            logger.error(f"catalog.create: record write failed, discarding uploads (item_id={item_id})")
            self._discard(urls, item_id=item_id)
            raise

        CATALOG_MUTATIONS.labels(operation="create", outcome="ok").inc()
        logger.info(
            f"catalog.create: ok (item_id={item_id}, model='{fields.model}', images={len(urls)})"
        )
        return persisted

    def update(
        self,
        item_id: int,
        fields: ListingFields,
        images: Sequence[ImageUpload] | None = None,
    ) -> CatalogItem:
        current = self.get(item_id)
        updated = current.with_fields(fields)

        if not images:
            persisted = self._items.save(updated)
            CATALOG_MUTATIONS.labels(operation="update", outcome="ok").inc()
            logger.info(f"catalog.update: ok (item_id={item_id}, images=unchanged)")
            return persisted

        self._check_image_count(images)
        new_urls = self._upload_all(images, item_id=item_id)

        try:
            persisted = self._items.save(updated.with_images(new_urls))
        except Exception:
            CATALOG_MUTATIONS.labels(operation="update", outcome="error").inc()
            logger.error(
                f"catalog.update: record write failed, discarding staged uploads (item_id={item_id})"
            )
            self._discard(new_urls, item_id=item_id)
            raise

        kept = set(new_urls)
        self._discard([url for url in current.images if url not in kept], item_id=item_id)

        CATALOG_MUTATIONS.labels(operation="update", outcome="ok").inc()
        logger.info(
            f"catalog.update: ok (item_id={item_id}, images={len(new_urls)}, "
            f"replaced={len(current.images)})"
        )
        return persisted

    def delete(self, item_id: int) -> CatalogItem:
        current = self.get(item_id)
        if not self._items.remove(item_id):
            # Lost a race with another delete.
            raise NotFoundError(item_id)

        self._discard(current.images, item_id=item_id)
        CATALOG_MUTATIONS.labels(operation="delete", outcome="ok").inc()
        logger.info(f"catalog.delete: ok (item_id={item_id}, images={len(current.images)})")
        return current

    def _check_image_count(self, images: Sequence[ImageUpload]) -> None:
        if len(images) > self._max_images:
            raise ValidationError(
                context={"fields": ["images"], "max_images": self._max_images, "received": len(images)}
            )

    def _upload_all(self, images: Sequence[ImageUpload], *, item_id: int) -> list[str]:
        """Upload concurrently, returning URLs in input order.

        Failed uploads are dropped under the ``partial`` policy. Nothing
        surviving, or any failure under ``strict``, raises UpstreamError after
        the successful uploads have been discarded.
        """
        results: list[str | None] = [None] * len(images)
        failed: list[int] = []

        workers = max(1, min(self._upload_workers, len(images)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="asset-upload") as pool:
            futures = {
                pool.submit(
                    contextvars.copy_context().run, self._assets.upload, image.data, image.filename
                ): index
                for index, image in enumerate(images)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                    ASSET_UPLOADS.labels(outcome="ok").inc()
                except Exception as exc:
                    failed.append(index)
                    ASSET_UPLOADS.labels(outcome="error").inc()
                    logger.warning(
                        f"catalog.upload: image dropped (item_id={item_id}, index={index}, "
                        f"error={type(exc).__name__}: {exc})"
                    )

        uploaded = [url for url in results if url is not None]
        if failed and (self._upload_policy == "strict" or not uploaded):
            self._discard(uploaded, item_id=item_id)
            raise UpstreamError(context={"failed_images": sorted(failed)})
        return uploaded

    def _discard(self, urls: Iterable[str], *, item_id: int) -> None:
        for url in urls:
            try:
                self._assets.delete(url)
            except Exception:
                logger.exception(f"catalog.discard: asset delete raised (item_id={item_id}, url={url})")
