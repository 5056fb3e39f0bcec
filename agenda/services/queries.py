from datetime import date

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from agenda.models.appointment import Appointment
from agenda.models.participant import AppointmentParticipant


class AppointmentQueryService:
    """Read path returning hydrated appointments."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _hydrated(self):
        return self._db.query(Appointment).options(
            joinedload(Appointment.creator),
            selectinload(Appointment.participants).joinedload(AppointmentParticipant.user),
        ).populate_existing()

    def get(self, appointment_id: int) -> Appointment | None:
        return self._hydrated().filter(Appointment.id == appointment_id).first()

    def list_for_user_on_date(self, user_id: int, user_email: str | None, on_date: date) -> list[Appointment]:
        """Appointments on ``on_date`` the user created or was invited to.

        Invitations match on the resolved user id or on the raw participant email,
        so rows stored before the account existed are still visible.
        """
        participant_match = AppointmentParticipant.user_id == user_id
        if user_email:
            participant_match = or_(participant_match, AppointmentParticipant.email == user_email)

        return self._hydrated().filter(
            Appointment.appointment_date == on_date,
            or_(
                Appointment.creator_id == user_id,
                Appointment.participants.any(participant_match),
            ),
        ).order_by(Appointment.appointment_time.asc(), Appointment.id.asc()).all()
