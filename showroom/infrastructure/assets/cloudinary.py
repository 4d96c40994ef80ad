# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Cloudinary asset store on top of the official SDK uploader."""

from __future__ import annotations

from types import ModuleType
from typing import Any
from urllib.parse import urlparse

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.exceptions import GeneralError, RateLimited

from showroom.domain.catalog.repositories import AssetStore
from showroom.infrastructure.observability import ASSET_DELETES
from showroom.infrastructure.resilience import CircuitBreaker, CircuitOpenError, resilient_call
from showroom.shared.config.settings import ResilienceConfig
from showroom.shared.errors import UpstreamError
from showroom.shared.logging import logger

# The SDK reports transport failures and 5xx answers as GeneralError; 4xx
# answers get their own classes and are not worth repeating.
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (GeneralError, RateLimited)


def public_id_from_url(url: str) -> str | None:
    """``.../image/upload/v1712/showroom/abc.jpg`` -> ``showroom/abc``."""
    parts = [part for part in urlparse(url).path.split("/") if part]
    try:
        start = parts.index("upload") + 1
    except ValueError:
        return None
    rest = parts[start:]
    if rest and rest[0].startswith("v") and rest[0][1:].isdigit():
        rest = rest[1:]
    if not rest:
        return None
    last = rest[-1]
    if "." in last:
        rest[-1] = last.rsplit(".", 1)[0]
    return "/".join(rest)


class CloudinaryAssetStore(AssetStore):
    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
        resilience: ResilienceConfig,
        upload_prefix: str | None = None,
        uploader: ModuleType | Any = cloudinary.uploader,
    ) -> None:
        self._folder = folder
        self._resilience = resilience
        self._uploader = uploader
        # Passed per call so the process-wide cloudinary.config() stays untouched.
        self._account: dict[str, Any] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "timeout": resilience.default_timeout,
        }
        if upload_prefix:
            self._account["upload_prefix"] = upload_prefix
        self._breaker = CircuitBreaker(
            failure_threshold=resilience.circuit_fail_threshold,
            reset_timeout=resilience.circuit_reset_timeout,
            name="cloudinary",
        )

    def _call(self, method: str, *args: Any, **options: Any) -> dict[str, Any]:
        return resilient_call(
            getattr(self._uploader, method),
            *args,
            config=self._resilience,
            breaker=self._breaker,
            retry_on=RETRYABLE_ERRORS,
            **options,
            **self._account,
        )

    def upload(self, data: bytes, filename: str | None = None) -> str:
        try:
            result = self._call(
                "upload",
                data,
                filename=filename or "upload",
                folder=self._folder,
                resource_type="image",
            )
            url = result["secure_url"]
        except (CloudinaryError, CircuitOpenError, KeyError, TypeError) as exc:
            logger.error(f"assets.cloudinary: upload failed error={type(exc).__name__}: {exc}")
            raise UpstreamError(context={"backend": "cloudinary"}) from exc
        logger.debug(f"assets.cloudinary: uploaded public_id={result.get('public_id')}")
        return str(url)

    def delete(self, url: str) -> None:
        public_id = public_id_from_url(url)
        if public_id is None:
            logger.info(f"assets.cloudinary: cannot derive public id, skipping url={url}")
            ASSET_DELETES.labels(outcome="skipped").inc()
            return
        try:
            result = self._call("destroy", public_id, resource_type="image", invalidate=True)
        except Exception as exc:
            logger.warning(
                f"assets.cloudinary: delete failed public_id={public_id} "
                f"error={type(exc).__name__}: {exc}"
            )
            ASSET_DELETES.labels(outcome="error").inc()
            return
        # "not found" means it is already gone.
        ASSET_DELETES.labels(outcome="ok").inc()
        logger.debug(f"assets.cloudinary: destroy public_id={public_id} result={result.get('result')}")


__all__ = ["RETRYABLE_ERRORS", "CloudinaryAssetStore", "public_id_from_url"]
