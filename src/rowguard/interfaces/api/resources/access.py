"""User, role and permission administration resources."""

from uuid import UUID

import falcon
import falcon.asgi

from rowguard.application.use_cases.access.delete_permission import DeletePermissionUseCase
from rowguard.application.use_cases.access.delete_role import DeleteRoleUseCase
from rowguard.application.use_cases.access.delete_user import DeleteUserUseCase
from rowguard.application.use_cases.access.update_permission import UpdatePermissionUseCase
from rowguard.application.use_cases.access.update_role_permissions import (
    UpdateRolePermissionsUseCase,
)
from rowguard.application.use_cases.access.update_user_roles import UpdateUserRolesUseCase
from rowguard.domain.exceptions import NotFound, PermissionDenied, ValidationError
from rowguard.domain.value_objects import SubjectType
from rowguard.interfaces.api.resources.serialization import to_json


def _unauthorized(req: falcon.asgi.Request, resp: falcon.asgi.Response) -> bool:
    if getattr(req.context, "user", None):
        return False
    resp.status = falcon.HTTP_401
    resp.media = {"error": "Unauthorized"}
    return True


def _uuid_list(value: object) -> list[UUID]:
    if not isinstance(value, list):
        raise ValueError("list of ids required")
    return [UUID(str(v)) for v in value]


class UserResource:
    """DELETE /v1/users/{user_id}."""

    subject_type = SubjectType.USER

    def __init__(self, delete_user: DeleteUserUseCase) -> None:
        self._delete_user = delete_user

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            await self._delete_user.execute(req.context.user.user_id, user_id)
            resp.status = falcon.HTTP_204
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "User not found"}


class UserRolesResource:
    """PUT /v1/users/{user_id}/roles - replace roles of user."""

    subject_type = SubjectType.USER

    def __init__(self, update_user_roles: UpdateUserRolesUseCase) -> None:
        self._update_user_roles = update_user_roles

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            body = await req.get_media()
            role_ids = _uuid_list(body.get("role_ids"))
        except (AttributeError, ValueError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Invalid role_ids: {e}"}
            return

        try:
            user = await self._update_user_roles.execute(
                req.context.user.user_id, user_id, role_ids
            )
            resp.media = {
                "id": user.id,
                "email": user.email,
                "roles": [{"id": str(r.id), "name": r.name} for r in user.roles],
            }
            resp.status = falcon.HTTP_200
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}


class RoleResource:
    """DELETE /v1/roles/{role_id}."""

    subject_type = SubjectType.ROLE

    def __init__(self, delete_role: DeleteRoleUseCase) -> None:
        self._delete_role = delete_role

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            r_id = UUID(role_id)
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid role ID"}
            return
        try:
            await self._delete_role.execute(req.context.user.user_id, r_id)
            resp.status = falcon.HTTP_204
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Role not found"}


class RolePermissionsResource:
    """PUT /v1/roles/{role_id}/permissions - replace rules of role (ordered)."""

    subject_type = SubjectType.ROLE

    def __init__(self, update_role_permissions: UpdateRolePermissionsUseCase) -> None:
        self._update_role_permissions = update_role_permissions

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            r_id = UUID(role_id)
            body = await req.get_media()
            permission_ids = _uuid_list(body.get("permission_ids"))
        except (AttributeError, ValueError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Invalid request: {e}"}
            return

        try:
            role = await self._update_role_permissions.execute(
                req.context.user.user_id, r_id, permission_ids
            )
            resp.media = {
                "id": str(role.id),
                "name": role.name,
                "permission_ids": [str(p.id) for p in role.permissions],
            }
            resp.status = falcon.HTTP_200
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}


class PermissionResource:
    """PATCH/DELETE /v1/permissions/{permission_id}."""

    subject_type = SubjectType.PERMISSION

    def __init__(
        self,
        update_permission: UpdatePermissionUseCase,
        delete_permission: DeletePermissionUseCase,
    ) -> None:
        self._update_permission = update_permission
        self._delete_permission = delete_permission

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            p_id = UUID(permission_id)
            body = await req.get_media()
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid permission ID"}
            return
        if not isinstance(body, dict):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "JSON object required"}
            return

        try:
            permission = await self._update_permission.execute(
                req.context.user.user_id, p_id, body
            )
            resp.media = to_json(permission)
            resp.status = falcon.HTTP_200
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Permission not found"}
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        if _unauthorized(req, resp):
            return
        try:
            p_id = UUID(permission_id)
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid permission ID"}
            return
        try:
            await self._delete_permission.execute(req.context.user.user_id, p_id)
            resp.status = falcon.HTTP_204
        except PermissionDenied:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Permission not found"}
