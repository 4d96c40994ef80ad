# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from showroom.domain.catalog.repositories import AssetStore
from showroom.shared.config import AppConfig

from .cloudinary import CloudinaryAssetStore
from .local import LocalAssetStore


class AssetConfigError(RuntimeError):
    pass


def build_asset_store(config: AppConfig) -> AssetStore:
    assets = config.assets
    if assets.backend == "local":
        return LocalAssetStore(assets.local_root, assets.public_base_url, folder=assets.folder)

    missing = [
        name
        for name, value in (
            ("CLOUDINARY_CLOUD_NAME", assets.cloudinary_cloud_name),
            ("CLOUDINARY_API_KEY", assets.cloudinary_api_key),
            ("CLOUDINARY_API_SECRET", assets.cloudinary_api_secret),
        )
        if not value
    ]
    if missing:
        raise AssetConfigError(f"cloudinary backend selected but {', '.join(missing)} not set")
    return CloudinaryAssetStore(
        cloud_name=assets.cloudinary_cloud_name,
        api_key=assets.cloudinary_api_key,
        api_secret=assets.cloudinary_api_secret,
        folder=assets.folder,
        resilience=config.resilience,
        upload_prefix=assets.cloudinary_upload_prefix,
    )


__all__ = ["AssetConfigError", "CloudinaryAssetStore", "LocalAssetStore", "build_asset_store"]
