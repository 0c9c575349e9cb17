from fastapi import Request
from starlette.authentication import UnauthenticatedUser

from library_api.exceptions import AuthenticationError, AuthorizationError
from library_api.logging import logger
from library_api.schemas.user import UserModel
from library_api.utils.metrics import permission_denied_total


class RBACManager:
    """
    Role-Based Access Control for HTTP endpoints.

    Role gates are FastAPI dependencies, so they run before the request
    body is read: a rejected caller never reaches parsing or persistence.
    """

    @staticmethod
    def check_user_has_roles(
        user: UserModel, required_roles: list[str]
    ) -> tuple[bool, list[str]]:
        """
        Core role-checking logic: checks if user has ALL required roles.

        Args:
            user: The user to check permissions for.
            required_roles: List of role names that the user must have.

        Returns:
            Tuple of (has_permission, missing_roles):
            - has_permission: True if user has all required roles
            - missing_roles: List of roles the user is missing
        """
        if not required_roles:
            return True, []

        missing_roles = [
            role for role in required_roles if role not in user.roles
        ]
        return len(missing_roles) == 0, missing_roles

    def require_roles(self, *roles: str):  # type: ignore[no-untyped-def]
        """
        Create a FastAPI dependency that requires the user to have ALL
        specified roles.

        Args:
            *roles: Variable number of role names that the user must have.

        Returns:
            A dependency function that checks if the user has all required roles.

        Example:
            ```python
            router = APIRouter()

            @router.delete(
                "/api/books/{id}",
                dependencies=[Depends(rbac_manager.require_roles("ROLE_ADMIN"))],
            )
            async def delete_book(id: int) -> Response: ...
            ```

        Raises:
            AuthenticationError: 401 if the caller is not authenticated.
            AuthorizationError: 403 if the caller lacks a required role.
        """

        async def check_roles(request: Request) -> None:
            user = request.scope.get("user")
            if user is None or isinstance(user, UnauthenticatedUser):
                permission_denied_total.labels(
                    method=request.method, endpoint=request.url.path
                ).inc()
                raise AuthenticationError(
                    "authentication_required", "Authentication required"
                )

            has_permission, missing_roles = self.check_user_has_roles(
                user, list(roles)
            )

            if not has_permission:
                permission_denied_total.labels(
                    method=request.method, endpoint=request.url.path
                ).inc()
                logger.info(
                    f"HTTP permission denied for user {user.username} on {request.method} {request.url.path}. "
                    f"Required roles: {list(roles)}, User roles: {user.roles}, "
                    f"Missing roles: {missing_roles}"
                )
                raise AuthorizationError(
                    "You do not have sufficient rights to modify books."
                )

        return check_roles


rbac_manager = RBACManager()
