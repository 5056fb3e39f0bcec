"""Persistence for appointments and their participant rosters.

Every write goes through :meth:`AppointmentStore.unit_of_work`, which commits
once at the end or rolls the whole transaction back.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.models.appointment import Appointment
from agenda.models.participant import AppointmentParticipant, ParticipantRef, ResolvedParticipant
from agenda.services.details import AppointmentDetails
from agenda.services.errors import StoreError

logger = logging.getLogger(__name__)


class AppointmentStore:

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def unit_of_work(self, failure_message: str):
        try:
            yield self._db
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception('Appointment transaction rolled back: %s', failure_message)
            raise StoreError(failure_message) from exc
        except Exception:
            self._db.rollback()
            raise

    def get(self, appointment_id: int, for_update: bool = False) -> Appointment | None:
        query = self._db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def participants_for(self, appointment_id: int) -> list[AppointmentParticipant]:
        return self._db.query(AppointmentParticipant).filter(
            AppointmentParticipant.appointment_id == appointment_id,
        ).order_by(AppointmentParticipant.id.asc()).all()

    def create(self, creator_id: int, details: AppointmentDetails, roster: list[ParticipantRef]) -> Appointment:
        appointment = Appointment(
            title=details.title,
            description=details.description,
            creator_id=creator_id,
            appointment_date=details.appointment_date,
            appointment_time=details.appointment_time,
            duration=details.duration_minutes,
        )
        self._db.add(appointment)
        self._db.flush()

        self._db.add_all(self._participant_rows(appointment.id, creator_id, roster))
        self._db.flush()

        return appointment

    def replace(self, appointment: Appointment, details: AppointmentDetails, roster: list[ParticipantRef]) -> Appointment:
        appointment.title = details.title
        appointment.description = details.description
        appointment.appointment_date = details.appointment_date
        appointment.appointment_time = details.appointment_time
        appointment.duration = details.duration_minutes
        self._db.flush()

        appointment.participants.clear()
        self._db.flush()

        appointment.participants.extend(
            self._participant_rows(appointment.id, appointment.creator_id, roster)
        )
        self._db.flush()

        return appointment

    def delete(self, appointment: Appointment) -> None:
        self._db.delete(appointment)
        self._db.flush()

    @staticmethod
    def _participant_rows(
        appointment_id: int,
        creator_id: int,
        roster: list[ParticipantRef],
    ) -> list[AppointmentParticipant]:
        rows = []
        for participant in roster:
            if isinstance(participant, ResolvedParticipant):
                user_id = participant.user_id
            else:
                user_id = None
            rows.append(
                AppointmentParticipant(
                    appointment_id=appointment_id,
                    user_id=user_id,
                    email=participant.email,
                    is_confirmed=user_id is not None and user_id == creator_id,
                )
            )
        return rows
