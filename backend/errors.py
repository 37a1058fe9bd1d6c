"""
Error taxonomy for the API.

Route handlers raise these; the gateway translates them into
JSON responses of the form {"error": <message>, "code": <code>}.
Anything that is not an ApiError is treated as a server error.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base class for errors that are safe to report to the caller."""

    status_code = 400
    code = "BadRequest"
    default_message = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(ApiError):
    code = "ValidationError"
    default_message = "Invalid input"


class InvalidIdentifier(ApiError):
    code = "InvalidIdentifier"
    default_message = "Invalid ID"


class Unauthenticated(ApiError):
    status_code = 401
    code = "Unauthenticated"
    default_message = "User not authenticated"


class InvalidCredentials(ApiError):
    code = "InvalidCredentials"
    default_message = "Invalid credentials"


class Conflict(ApiError):
    """A unique field (username or email) is already taken."""

    code = "Conflict"

    MESSAGES = {
        "email": "Email already registered",
        "username": "Username already taken",
    }

    def __init__(self, field: str):
        self.field = field
        super().__init__(self.MESSAGES.get(field, f"{field} already exists"))

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["field"] = self.field
        return body


class NotFound(ApiError):
    status_code = 404
    code = "NotFound"
    default_message = "Not found"


class AlreadyJoined(ApiError):
    code = "AlreadyJoined"
    default_message = "You are already registered for this event"


class NotJoined(ApiError):
    code = "NotJoined"
    default_message = "You are not registered for this event"


class EventFull(ApiError):
    code = "EventFull"
    default_message = "Event is full"
