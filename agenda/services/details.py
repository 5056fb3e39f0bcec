from dataclasses import dataclass, field, replace
from datetime import date, time

from agenda.core import config
from agenda.services.errors import ValidationError


@dataclass
class AppointmentDetails:
    """Writable fields of an appointment plus the submitted participant emails."""

    title: str | None
    appointment_date: date | None
    appointment_time: time | None
    description: str | None = None
    duration_minutes: int | None = None
    participant_emails: list[str | None] = field(default_factory=list)

    def validated(self) -> 'AppointmentDetails':
        title = (self.title or '').strip()

        missing_fields = []
        if not title:
            missing_fields.append('title')
        if self.appointment_date is None:
            missing_fields.append('appointmentDate')
        if self.appointment_time is None:
            missing_fields.append('appointmentTime')
        if missing_fields:
            raise ValidationError('Missing information', fields=missing_fields)

        duration_minutes = self.duration_minutes
        if duration_minutes is None:
            duration_minutes = config.DEFAULT_APPOINTMENT_DURATION_MINUTES
        if duration_minutes <= 0:
            raise ValidationError('Duration must be a positive number of minutes.', fields=['duration'])

        description = (self.description or '').strip() or None

        return replace(
            self,
            title=title,
            description=description,
            duration_minutes=duration_minutes,
        )
