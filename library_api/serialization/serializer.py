"""
JSON encoding of catalog entities and decoding of request bodies.

Example:
    ```python
    from library_api.serialization import ViewGroup, deserialize, serialize

    payload = serialize(books, ViewGroup.GET_BOOKS)  # bytes, JSON array
    book = deserialize(body, BookPayload, existing=stored_book)
    ```
"""

import json
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from library_api.exceptions import ValidationError
from library_api.serialization.views import ViewGroup, parse_version, project

TShape = TypeVar("TShape", bound=BaseModel)


def serialize(
    obj: Any, group: ViewGroup, version: str | None = None
) -> bytes:
    """
    Encode an entity or a list of entities as UTF-8 JSON.

    Args:
        obj: Book, Author, or a list of them.
        group: View group selecting the projection.
        version: API version token (None = emit every field).

    Returns:
        JSON bytes; a list input yields a JSON array.
    """
    parsed = parse_version(version) if version is not None else None

    if isinstance(obj, (list, tuple)):
        data: Any = [project(item, group, parsed) for item in obj]
    else:
        data = project(obj, group, parsed)

    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def _violations(ex: PydanticValidationError) -> list[dict[str, str]]:
    violations = []
    for error in ex.errors():
        field = ".".join(str(part) for part in error["loc"])
        violations.append({"field": field, "message": error["msg"]})
    return violations


def parse(data: bytes, shape: type[TShape]) -> TShape:
    """
    Decode a JSON request body into an input model.

    Args:
        data: Raw request body.
        shape: Pydantic model describing the body.

    Returns:
        The parsed model; ``model_fields_set`` tells which fields the
        body carried.

    Raises:
        ValidationError: Malformed JSON, a non-object body, or fields of the
            wrong type.
    """
    try:
        return shape.model_validate_json(data)
    except PydanticValidationError as ex:
        raise ValidationError(
            "Invalid request body", violations=_violations(ex)
        ) from ex


def deserialize(data: bytes, shape: type[TShape], existing: Any = None) -> Any:
    """
    Parse a request body and turn it into an entity.

    Args:
        data: Raw request body.
        shape: Input model exposing ``to_entity(existing)``.
        existing: Stored entity to merge onto (None = build a new one).

    Returns:
        The new entity, or ``existing`` with the body's fields applied.

    Raises:
        ValidationError: If the body cannot be parsed.
    """
    return parse(data, shape).to_entity(existing)  # type: ignore[attr-defined]
