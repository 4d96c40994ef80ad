# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Filesystem-backed asset store for development and single-host deployments."""

from __future__ import annotations

import re
import secrets
from pathlib import Path, PurePosixPath

from showroom.domain.catalog.repositories import AssetStore
from showroom.infrastructure.observability import ASSET_DELETES
from showroom.shared.errors import UpstreamError
from showroom.shared.logging import logger

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,5}$")


class LocalAssetStore(AssetStore):
    """Stores files on local filesystem within configured root."""

    def __init__(self, root: Path, public_base_url: str, folder: str = "showroom") -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = public_base_url.rstrip("/")
        self._folder = folder.strip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, relative_path: str) -> Path:
        path = (self._root / relative_path).resolve()
        if not path.is_relative_to(self._root.resolve()):
            msg = "Attempted directory traversal outside storage root"
            raise ValueError(msg)
        return path

    def upload(self, data: bytes, filename: str | None = None) -> str:
        suffix = PurePosixPath(filename or "").suffix.lower()
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""
        key = f"{self._folder}/{secrets.token_hex(16)}{suffix}"
        try:
            file_path = self._resolve(key)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)
        except OSError as exc:
            logger.error(f"assets.local: write failed key={key} error={exc}")
            raise UpstreamError(context={"backend": "local"}) from exc
        logger.debug(f"assets.local: stored key={key} size={len(data)}")
        return f"{self._base_url}/{key}"

    def delete(self, url: str) -> None:
        prefix = f"{self._base_url}/"
        if not url.startswith(prefix):
            logger.info(f"assets.local: ignoring foreign url={url}")
            ASSET_DELETES.labels(outcome="skipped").inc()
            return
        try:
            self._resolve(url[len(prefix):]).unlink(missing_ok=True)
        except (OSError, ValueError) as exc:
            logger.warning(f"assets.local: delete failed url={url} error={exc}")
            ASSET_DELETES.labels(outcome="error").inc()
            return
        ASSET_DELETES.labels(outcome="ok").inc()
        logger.debug(f"assets.local: deleted url={url}")


__all__ = ["LocalAssetStore"]
