"""Domain errors raised by the booking core.

Each error knows the HTTP status it maps to and how to render itself as the
``{error, code?, unknownParticipants?}`` envelope returned to callers.
"""


class BookingError(Exception):
    status_code = 400
    code = 'BOOKING_ERROR'

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {'error': self.message, 'code': self.code}


class ValidationError(BookingError):
    code = 'VALIDATION_ERROR'

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.fields:
            payload['fields'] = self.fields
        return payload


class UnknownParticipantsError(BookingError):
    code = 'UNKNOWN_PARTICIPANTS'

    def __init__(self, unknown_participants: list[str]) -> None:
        super().__init__('Some participants are not registered users')
        self.unknown_participants = unknown_participants

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload['unknownParticipants'] = self.unknown_participants
        return payload


class NotFoundError(BookingError):
    status_code = 404
    code = 'NOT_FOUND'


class ForbiddenError(BookingError):
    status_code = 403
    code = 'FORBIDDEN'


class StoreError(BookingError):
    status_code = 500
    code = 'STORE_ERROR'
