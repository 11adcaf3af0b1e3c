"""Domain exceptions, each carrying the HTTP status it maps to."""


class PropertyHubError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(PropertyHubError):
    status_code = 400
    default_detail = "Invalid request"


class DuplicateEmailError(ValidationError):
    default_detail = "Email already in use"


class UnauthorizedError(PropertyHubError):
    status_code = 401
    default_detail = "Unauthorized"


class ForbiddenError(PropertyHubError):
    # Never says why: ownership details stay private.
    status_code = 403
    default_detail = "Forbidden"


class NotFoundError(PropertyHubError):
    status_code = 404
    default_detail = "Not found"
