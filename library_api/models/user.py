from sqlalchemy import JSON, Column
from sqlmodel import Field

from library_api.models.base import BaseModel


class User(BaseModel, table=True):
    """
    Account allowed to call the API with local credentials.

    Users are provisioned by the fixture loader (or another external
    provisioning path); the CRUD endpoints never create or modify them.

    Attributes:
        id: Primary key identifier
        email: Login handle
        roles: Role tags, e.g. ["ROLE_USER"] or ["ROLE_ADMIN"]
        password: bcrypt hash of the password
    """

    __tablename__ = "users"  # type: ignore[assignment]
    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(max_length=180, unique=True, index=True)
    roles: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    password: str
