from library_api.schemas.book import BookPayload, validate_book
from library_api.schemas.user import UserModel

__all__ = ["BookPayload", "UserModel", "validate_book"]
