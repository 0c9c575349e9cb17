"""API version negotiation through the Accept header."""

from fastapi import Request

from library_api.settings import app_settings


class VersioningService:
    """
    Reads the requested API version from the ``version`` parameter of the
    Accept header, e.g. ``Accept: application/json; version=2.0``.
    """

    def __init__(self, request: Request, default: str | None = None) -> None:
        self.request = request
        self.default = default or app_settings.API_DEFAULT_VERSION

    def get_version(self) -> str:
        """Requested version, or the default when none is given."""
        accept = self.request.headers.get("accept", "")
        for media_range in accept.split(","):
            for param in media_range.split(";")[1:]:
                name, _, value = param.partition("=")
                if name.strip().lower() == "version" and value.strip():
                    return value.strip().strip('"')
        return self.default
