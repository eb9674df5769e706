from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ticketdesk.authz.admin import RoleAdministration
from ticketdesk.authz.context import AuthzContext
from ticketdesk.schemas.security import (
    CreateRoleIn,
    IdentityOut,
    MessageResponse,
    MigrateIdentitiesIn,
    MigrateIdentitiesResponse,
    OrphanedIdentitiesResponse,
    PermissionsUpdateIn,
    RenameRoleIn,
    RenameRoleResponse,
    RoleListResponse,
    RoleOut,
    RoleResponse,
)
from ticketdesk.security.config import Gate
from ticketdesk.security.decorators import require_gate
from ticketdesk.security.dependencies import get_authz_context, get_role_administration

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=RoleListResponse)
@require_gate(Gate.ELEVATED)
def list_roles(admin: RoleAdministration = Depends(get_role_administration)) -> RoleListResponse:
    roles = admin.store.list_all()
    return RoleListResponse(permissions=[RoleOut.model_validate(r) for r in roles])


@router.get("/roles/orphans", response_model=OrphanedIdentitiesResponse)
@require_gate(Gate.ELEVATED)
def list_orphaned_identities(
    admin: RoleAdministration = Depends(get_role_administration),
) -> OrphanedIdentitiesResponse:
    return OrphanedIdentitiesResponse(
        identities=[IdentityOut.model_validate(i) for i in admin.orphaned_identities()]
    )


@router.get("/{role}", response_model=RoleResponse)
def get_role(role: str, admin: RoleAdministration = Depends(get_role_administration)) -> RoleResponse:
    return RoleResponse(permissions=RoleOut.model_validate(admin.store.require(role)))


@router.put("/{role}", response_model=RoleResponse)
@require_gate(Gate.ELEVATED)
def update_role_permissions(
    role: str,
    body: PermissionsUpdateIn,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> RoleResponse:
    updated = admin.update_permissions(role, body.permissions, actor=ctx)
    return RoleResponse(
        message=f"Permissions updated for {role} role",
        permissions=RoleOut.model_validate(updated),
    )


@router.post("/reset/{role}", response_model=RoleResponse)
@require_gate(Gate.ELEVATED)
def reset_role_permissions(
    role: str,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> RoleResponse:
    reset = admin.reset_permissions(role, actor=ctx)
    return RoleResponse(
        message=f"Permissions reset to defaults for {role} role",
        permissions=RoleOut.model_validate(reset),
    )


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
@require_gate(Gate.ELEVATED)
def create_role(
    body: CreateRoleIn,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> RoleResponse:
    created = admin.create_role(body.role_name, based_on=body.based_on, actor=ctx)
    return RoleResponse(
        message=f"Role {created.name} created",
        permissions=RoleOut.model_validate(created),
    )


@router.delete("/roles/{role}", response_model=MessageResponse)
@require_gate(Gate.ELEVATED)
def delete_role(
    role: str,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> MessageResponse:
    admin.delete_role(role, actor=ctx)
    return MessageResponse(message=f"Role {role} deleted")


@router.put("/roles/{role}/rename", response_model=RenameRoleResponse)
@require_gate(Gate.ELEVATED)
def rename_role(
    role: str,
    body: RenameRoleIn,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> RenameRoleResponse:
    result = admin.rename_role(role, body.new_role_name, actor=ctx)
    return RenameRoleResponse(
        message=f"Role {role} renamed to {result.role.name}",
        role=RoleOut.model_validate(result.role),
        users_updated=result.users_updated,
    )


@router.post("/roles/{role}/migrate", response_model=MigrateIdentitiesResponse)
@require_gate(Gate.ELEVATED)
def migrate_identities(
    role: str,
    body: MigrateIdentitiesIn,
    ctx: AuthzContext = Depends(get_authz_context),
    admin: RoleAdministration = Depends(get_role_administration),
) -> MigrateIdentitiesResponse:
    updated = admin.migrate_identities(body.from_role_name, role, actor=ctx)
    return MigrateIdentitiesResponse(
        message=f"Moved identities from {body.from_role_name} to {role}",
        users_updated=updated,
    )
