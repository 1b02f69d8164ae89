"""
Domain errors of the booking pipeline.

The HTTP layer maps them to status codes in palina.main.
"""


class PalinaError(Exception):
    """Base class for booking pipeline errors"""


class ValidationError(PalinaError):
    """A required field is missing or a value is not acceptable"""


class BookingNotFoundError(PalinaError):
    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class TransportError(PalinaError):
    """Messaging provider unreachable or rejected the message"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message)


class ImportRowError(PalinaError):
    """A spreadsheet row that cannot be applied"""

    def __init__(self, row_number: int, message: str):
        self.row_number = row_number
        super().__init__(f"Row {row_number}: {message}")
