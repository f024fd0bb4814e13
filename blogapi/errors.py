# blogapi/errors.py
"""Error types raised by the stores, the authenticator and the routes.

Every error carries the HTTP status it maps to and a message that is safe to
show to clients. Internal details stay in the logs.
"""


class BlogAPIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    status_code = 400
    message = "Bad request"


class DuplicateUsername(BlogAPIError):
    status_code = 400
    message = "Username already taken"


class AuthError(BlogAPIError):
    status_code = 401
    message = "Unauthorized"


class NotFound(BlogAPIError):
    status_code = 404
    message = "Not Found"


class InvalidIdentifier(NotFound):
    """Identifier that can never match a stored document."""


class UnexpectedStorageError(BlogAPIError):
    status_code = 500
    message = "Internal server error"


class HashingError(BlogAPIError):
    status_code = 500
    message = "Internal server error"
