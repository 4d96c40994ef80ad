# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError


def _field_name(loc: tuple[Any, ...]) -> str:
    # Body-level errors have an empty loc.
    return ".".join(str(part) for part in loc) or "body"


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Flatten pydantic errors into ``{"fields": [...], "errors": [...]}``.

    ``fields`` lists each offending input once, in order of first appearance,
    so clients can highlight form inputs directly.
    """
    fields: dict[str, None] = {}
    errors: list[dict[str, Any]] = []
    for error in exc.errors(include_url=False, include_input=False):
        name = _field_name(tuple(error.get("loc", ())))
        fields.setdefault(name, None)
        entry: dict[str, Any] = {"field": name, "type": error["type"], "message": error["msg"]}
        if error.get("ctx"):
            entry["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(entry)
    return {"fields": list(fields), "errors": errors}


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = ["format_pydantic_errors", "raise_validation_error"]
