# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CredentialsRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be blank")
        return value


class RotateRequestDTO(BaseModel):
    model_config = ConfigDict(validate_by_name=True, validate_by_alias=True)

    username: str = Field(min_length=1, max_length=64)
    current_password: str = Field(min_length=1, max_length=128, alias="currentPassword")
    new_password: str = Field(min_length=1, max_length=128, alias="newPassword")

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be blank")
        return value


class ExistsDTO(BaseModel):
    exists: bool


class OkDTO(BaseModel):
    ok: bool = True
