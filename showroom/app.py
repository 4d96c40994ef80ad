# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time

from flask import Flask, g, request
from flask_cors import CORS

from showroom.domain.catalog.repositories import AssetStore
from showroom.infrastructure.admin_setup import setup_admin_user
from showroom.infrastructure.container import Container
from showroom.infrastructure.observability import observe_request
from showroom.interfaces.http.auth_gate import SESSIONS_EXTENSION
from showroom.shared.config import AppConfig, load_config
from showroom.shared.errors import register_error_handler
from showroom.shared.logging import logger, setup_logging
from showroom.shared.middleware.rate_limit import CONFIG_EXTENSION
from showroom.shared.middleware.request_logger import configure_request_logging

CONTAINER_EXTENSION = "showroom"


def _configure_security_headers(app: Flask, config: AppConfig) -> None:
    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        # Listing images are embedded by the public site.
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "cross-origin")
        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
        )
        resp.headers.setdefault("X-Permitted-Cross-Domain-Policies", "none")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return resp


def _configure_metrics(app: Flask) -> None:
    @app.before_request
    def _start_timer() -> None:
        g.metrics_start_time = time.perf_counter()

    @app.after_request
    def _observe(resp):
        start = g.get("metrics_start_time")
        if start is not None:
            endpoint = request.url_rule.rule if request.url_rule is not None else "unmatched"
            observe_request(endpoint, resp.status_code, time.perf_counter() - start)
        return resp


def create_app(config: AppConfig | None = None, *, asset_store: AssetStore | None = None) -> Flask:
    config = config or load_config()
    setup_logging(
        level="DEBUG" if config.debug_logging else config.log_level,
        log_file=config.log_file,
        service=config.observability.service_name,
    )

    for warning in config.security_warnings():
        logger.warning(f"config: production hardening gap: {warning}")

    container = Container(config, asset_store=asset_store)
    # Schema and id sequence are created before the first request.
    container.catalog_repository.ensure_sequence()
    setup_admin_user(config, container.credential_store)

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)
    app.extensions[CONFIG_EXTENSION] = config
    app.extensions[CONTAINER_EXTENSION] = container
    app.extensions[SESSIONS_EXTENSION] = container.session_issuer

    register_error_handler(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)
    if config.observability.metrics_enabled:
        _configure_metrics(app)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.admin_controller.as_blueprint())
    app.register_blueprint(container.catalog_controller.as_blueprint())

    _configure_security_headers(app, config)

    logger.info(
        f"Flask app initialized (env={config.app_env}, assets={config.assets.backend}, "
        f"upload_policy={config.catalog.upload_policy})"
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
