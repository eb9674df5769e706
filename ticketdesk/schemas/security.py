from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire format is camelCase; Python attributes stay snake_case."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class RoleOut(CamelModel):
    name: str
    is_custom: bool
    permissions: dict[str, bool]
    updated_at: datetime | None = None


class IdentityOut(CamelModel):
    id: int
    display_name: str
    email: str
    role: str
    approved: bool


class RoleListResponse(CamelModel):
    success: bool = True
    permissions: list[RoleOut]


class RoleResponse(CamelModel):
    success: bool = True
    message: str | None = None
    permissions: RoleOut


class PermissionsUpdateIn(CamelModel):
    permissions: dict[str, StrictBool]


class CreateRoleIn(CamelModel):
    role_name: str = Field(min_length=1)
    based_on: str | None = None


class RenameRoleIn(CamelModel):
    new_role_name: str = Field(min_length=1)


class MigrateIdentitiesIn(CamelModel):
    from_role_name: str = Field(min_length=1)


class RenameRoleResponse(CamelModel):
    success: bool = True
    message: str
    role: RoleOut
    users_updated: int


class MigrateIdentitiesResponse(CamelModel):
    success: bool = True
    message: str
    users_updated: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class OrphanedIdentitiesResponse(CamelModel):
    success: bool = True
    identities: list[IdentityOut]


class MeResponse(CamelModel):
    success: bool = True
    identity: IdentityOut
    permissions: dict[str, bool]


class IdentityListResponse(CamelModel):
    success: bool = True
    identities: list[IdentityOut]
