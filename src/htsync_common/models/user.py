"""Directory user record as read from the canonical user directory."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from htsync_common.models.credential import check_identity


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserRecord(BaseModel):
    """A user as owned by the external directory. Read-only to the engine."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identity: str = Field(min_length=1)
    display_name: str = Field(default="", alias="displayName")
    role: Role = Role.USER

    @model_validator(mode="before")
    @classmethod
    def _accept_directory_aliases(cls, data: Any) -> Any:
        # Directory exports key users by email and split the name in two.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("identity"):
            data["identity"] = data.get("email") or data.get("emailId") or ""
        if not data.get("displayName") and not data.get("display_name"):
            name = data.get("name") or " ".join(
                part for part in (data.get("firstName"), data.get("lastName")) if part
            )
            if name:
                data["displayName"] = name
        return data

    @field_validator("identity")
    @classmethod
    def _strip_identity(cls, value: str) -> str:
        return check_identity(value.strip())

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        if isinstance(value, Role):
            return value
        if isinstance(value, str) and value.strip().lower() == Role.ADMIN.value:
            return Role.ADMIN
        return Role.USER


class RejectedRecord(BaseModel):
    """A directory entry that could not be read as a :class:`UserRecord`."""

    identity: str
    error: str
