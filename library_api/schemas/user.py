from datetime import datetime

from pydantic import BaseModel, Field


class UserModel(BaseModel):  # type: ignore[misc]
    """
    Authenticated caller.

    Built either from a decoded Keycloak token (client roles are read from
    ``resource_access[azp]``) or, for local HTTP Basic accounts, from the
    user row with ``roles`` passed directly.
    """

    id: str = Field(..., alias="sub")
    expired_in: int = Field(
        ..., alias="exp"
    )  # timestamp when the session expires
    username: str = Field(..., alias="preferred_username")
    roles: list[str] = []

    def __init__(self, **kwargs) -> None:  # type: ignore[no-untyped-def]
        # Keycloak token: take the client roles
        if "azp" in kwargs:
            kwargs["roles"] = (
                kwargs.get("resource_access", {})
                .get(kwargs["azp"], {})
                .get("roles", [])
            )

        super(UserModel, self).__init__(**kwargs)

    @property
    def expired_seconds(self) -> int:
        return self.expired_in - int(datetime.now().timestamp())

    def __hash__(self) -> int:
        return hash(self.id)
