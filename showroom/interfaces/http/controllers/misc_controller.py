# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from flask import Blueprint, Response, jsonify, send_from_directory

from showroom.infrastructure.db.session import Database
from showroom.infrastructure.health import check_database
from showroom.infrastructure.observability import render_metrics
from showroom.shared.logging import logger


class MiscController:
    def __init__(
        self,
        *,
        database: Database,
        metrics_enabled: bool = True,
        service_name: str = "showroom-backend",
        local_assets_root: Path | None = None,
        local_assets_url: str = "/assets",
    ) -> None:
        self._database = database
        self._metrics_enabled = metrics_enabled
        self._service_name = service_name
        self._local_assets_root = local_assets_root
        self._local_assets_path = urlparse(local_assets_url).path.rstrip("/") or "/assets"

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        if self._metrics_enabled:
            bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        if self._local_assets_root is not None:
            bp.add_url_rule(
                f"{self._local_assets_path}/<path:filename>",
                view_func=self.local_asset,
                methods=["GET"],
            )
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True, "service": self._service_name}
        try:
            check_database(self._database)
            status["database"] = "ok"
        except Exception as exc:
            logger.error(f"health: database check failed error={type(exc).__name__}")
            status["ok"] = False
            status["database"] = "error"
        return jsonify(status)

    def metrics(self) -> Response:
        body, content_type = render_metrics()
        return Response(body, content_type=content_type)

    def local_asset(self, filename: str) -> Response:
        # send_from_directory refuses paths escaping the root.
        return send_from_directory(self._local_assets_root.resolve(), filename)
