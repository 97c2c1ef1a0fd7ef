"""Domain errors raised by the room services and translated to HTTP codes by the API."""


class RoomError(Exception):
    """Base class for recoverable room errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RoomError):
    """Malformed room configuration or schedule (HTTP 400)."""


class ScheduleValidationError(ValidationError):
    """A schedule was rejected. `slot` is the 1-based position of the offending slot."""

    def __init__(self, message: str, slot: int | None = None):
        super().__init__(message)
        self.slot = slot


class RoomNotFoundError(RoomError):
    """Unknown room id (HTTP 404)."""

    def __init__(self, room_id: str):
        super().__init__("Room not found")
        self.room_id = room_id


class RoomAuthError(RoomError):
    """Password mismatch on a protected room (HTTP 401)."""
