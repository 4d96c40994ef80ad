# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from showroom.application.services.catalog_service import CatalogService
from showroom.domain.catalog.entities import ImageUpload, ListingFields
from showroom.domain.exceptions import InvariantViolation
from showroom.infrastructure.audit import AuditAction, audit_log
from showroom.interfaces.http.auth_gate import current_principal, require_session
from showroom.interfaces.http.dto.catalog import ListingFormDTO
from showroom.shared.errors import ValidationError
from showroom.shared.errors.validation import raise_validation_error


def _listing_fields() -> ListingFields:
    try:
        form: dict[str, object] = request.form.to_dict()
        if "features" in request.form:
            form["features"] = request.form.getlist("features")
        dto = ListingFormDTO.model_validate(form)
    except PydanticValidationError as exc:
        raise_validation_error(exc)
    try:
        return dto.to_fields()
    except InvariantViolation as exc:
        raise ValidationError(context={"fields": [exc.field or "unknown"], "reason": exc.reason}) from exc


def _image_uploads() -> list[ImageUpload]:
    uploads = []
    for storage in request.files.getlist("images"):
        data = storage.read()
        if not data:
            continue
        uploads.append(
            ImageUpload(data=data, filename=storage.filename or None, content_type=storage.mimetype or None)
        )
    return uploads


class CatalogController:
    def __init__(self, *, catalog: CatalogService) -> None:
        self._catalog = catalog

    def list_items(self) -> tuple[Response, int]:
        return jsonify([item.to_dict() for item in self._catalog.list_items()]), 200

    def get_item(self, item_id: int) -> tuple[Response, int]:
        return jsonify(self._catalog.get(item_id).to_dict()), 200

    @require_session
    def create_item(self) -> tuple[Response, int]:
        fields = _listing_fields()
        item = self._catalog.create(fields, _image_uploads())
        audit_log(
            AuditAction.CATALOG_ITEM_CREATED,
            username=current_principal().username,
            details={"item_id": item.id, "images": len(item.images)},
        )
        return jsonify(item.to_dict()), 201

    @require_session
    def update_item(self, item_id: int) -> tuple[Response, int]:
        self._catalog.get(item_id)
        fields = _listing_fields()
        item = self._catalog.update(item_id, fields, _image_uploads())
        audit_log(
            AuditAction.CATALOG_ITEM_UPDATED,
            username=current_principal().username,
            details={"item_id": item.id, "images": len(item.images)},
        )
        return jsonify(item.to_dict()), 200

    @require_session
    def delete_item(self, item_id: int) -> tuple[Response, int]:
        item = self._catalog.delete(item_id)
        audit_log(
            AuditAction.CATALOG_ITEM_DELETED,
            username=current_principal().username,
            details={"item_id": item.id},
        )
        return jsonify(item.to_dict()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")
        bp.add_url_rule("", view_func=self.list_items, methods=["GET"])
        bp.add_url_rule("", view_func=self.create_item, methods=["POST"])
        bp.add_url_rule("/<int:item_id>", view_func=self.get_item, methods=["GET"])
        bp.add_url_rule("/<int:item_id>", view_func=self.update_item, methods=["PUT"])
        bp.add_url_rule("/<int:item_id>", view_func=self.delete_item, methods=["DELETE"])
        return bp
