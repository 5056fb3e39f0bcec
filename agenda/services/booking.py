"""Booking orchestration: authorization, validation, participant resolution
and the atomic write of an appointment with its roster."""

import logging

from sqlalchemy.orm import Session

from agenda.models.appointment import Appointment
from agenda.services.details import AppointmentDetails
from agenda.services.errors import ForbiddenError, NotFoundError, StoreError
from agenda.services.participants import ParticipantResolver
from agenda.services.queries import AppointmentQueryService
from agenda.services.store import AppointmentStore

logger = logging.getLogger(__name__)


class BookingService:

    def __init__(
        self,
        db: Session,
        resolver: ParticipantResolver | None = None,
        store: AppointmentStore | None = None,
        queries: AppointmentQueryService | None = None,
    ) -> None:
        self.resolver = resolver or ParticipantResolver(db)
        self.store = store or AppointmentStore(db)
        self.queries = queries or AppointmentQueryService(db)

    def create(self, actor_id: int, details: AppointmentDetails) -> Appointment:
        details = details.validated()

        with self.store.unit_of_work('Error creating appointment'):
            # Creation is strict: every participant must already have an account.
            roster = self.resolver.build_roster(details.participant_emails, strict=True)
            appointment = self.store.create(actor_id, details, roster)
            appointment_id = appointment.id

        logger.info(
            'User %s created appointment %s with %d participants',
            actor_id,
            appointment_id,
            len(roster),
        )
        return self._reload(appointment_id)

    def update(self, actor_id: int, appointment_id: int, details: AppointmentDetails) -> Appointment:
        with self.store.unit_of_work('Error updating appointment'):
            existing = self._load_owned(
                actor_id,
                appointment_id,
                'You are not authorized to modify this appointment',
            )
            details = details.validated()
            # Updates accept unknown emails and store them unresolved.
            roster = self.resolver.build_roster(details.participant_emails, strict=False)
            self.store.replace(existing, details, roster)

        logger.info(
            'User %s updated appointment %s with %d participants',
            actor_id,
            appointment_id,
            len(roster),
        )
        return self._reload(appointment_id)

    def delete(self, actor_id: int, appointment_id: int) -> None:
        with self.store.unit_of_work('Error deleting appointment'):
            existing = self._load_owned(
                actor_id,
                appointment_id,
                'You are not authorized to delete this appointment',
            )
            self.store.delete(existing)

        logger.info('User %s deleted appointment %s', actor_id, appointment_id)

    def _load_owned(self, actor_id: int, appointment_id: int, forbidden_message: str) -> Appointment:
        existing = self.store.get(appointment_id, for_update=True)
        if existing is None:
            raise NotFoundError('Appointment not found')
        if existing.creator_id != actor_id:
            raise ForbiddenError(forbidden_message)
        return existing

    def _reload(self, appointment_id: int) -> Appointment:
        appointment = self.queries.get(appointment_id)
        if appointment is None:
            raise StoreError('Appointment could not be read back after saving')
        return appointment
