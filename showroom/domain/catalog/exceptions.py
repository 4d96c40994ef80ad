# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from showroom.shared.errors.base import DomainError


class NotFoundError(DomainError):
    code = "item_not_found"
    status = HTTPStatus.NOT_FOUND

    def __init__(self, item_id: int) -> None:
        super().__init__(context={"item_id": item_id})
