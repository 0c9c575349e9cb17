"""
FastAPI dependencies for role-based access control.

Example:
    ```python
    from fastapi import APIRouter, Depends
    from library_api.dependencies.permissions import require_admin

    router = APIRouter()


    @router.post("/api/books", dependencies=[Depends(require_admin)])
    async def create_book(request: Request) -> Response: ...
    ```
"""

from library_api.managers.rbac_manager import rbac_manager
from library_api.settings import app_settings


def require_roles(*roles: str):  # type: ignore[no-untyped-def]
    """
    Create a FastAPI dependency that requires the user to have ALL specified
    roles.

    Args:
        *roles: Variable number of role names that the user must have.

    Returns:
        A dependency function that checks if the user has all required roles.

    Raises:
        HTTPException: 401 if user is not authenticated, 403 if user lacks
            required roles.
    """
    return rbac_manager.require_roles(*roles)


# Gate for every catalog mutation
require_admin = require_roles(app_settings.ADMIN_ROLE)
