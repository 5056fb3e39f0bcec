from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.auth.dependencies import get_current_user
from agenda.database import get_db
from agenda.models.appointment import Appointment
from agenda.models.participant import ResolvedParticipant
from agenda.models.user import User
from agenda.services.booking import BookingService
from agenda.services.details import AppointmentDetails
from agenda.services.errors import StoreError
from agenda.services.queries import AppointmentQueryService

router = APIRouter(tags=['appointments'])


class ParticipantRequest(BaseModel):
    email: str | None = None


class AppointmentRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    appointment_date: date | None = Field(default=None, alias='appointmentDate')
    appointment_time: time | None = Field(default=None, alias='appointmentTime')
    duration: int | None = None
    participants: list[ParticipantRequest] | None = None

    class Config:
        populate_by_name = True

    @field_validator('appointment_date', 'appointment_time', 'duration', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_details(self) -> AppointmentDetails:
        return AppointmentDetails(
            title=self.title,
            description=self.description,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            duration_minutes=self.duration,
            participant_emails=[participant.email for participant in self.participants or []],
        )


class ParticipantResponse(BaseModel):
    id: int
    user_id: int | None = None
    email: str
    is_confirmed: bool
    name: str | None = None


class AppointmentResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    creator_id: int
    creator_name: str | None = None
    appointment_date: date
    appointment_time: time
    duration: int
    created_at: datetime | None = None
    participants: list[ParticipantResponse]


class AppointmentMutationResponse(BaseModel):
    success: bool = True
    message: str
    appointment: AppointmentResponse


class DeleteAppointmentResponse(BaseModel):
    success: bool = True
    message: str


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def to_participant_response(row) -> ParticipantResponse:
    identity = row.identity
    if isinstance(identity, ResolvedParticipant):
        user_id, name = identity.user_id, identity.name
    else:
        user_id, name = None, None

    return ParticipantResponse(
        id=row.id,
        user_id=user_id,
        email=identity.email,
        is_confirmed=bool(row.is_confirmed),
        name=name,
    )


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        title=appointment.title,
        description=appointment.description,
        creator_id=appointment.creator_id,
        creator_name=appointment.creator.name if appointment.creator else None,
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        duration=appointment.duration,
        created_at=appointment.created_at,
        participants=[to_participant_response(row) for row in appointment.participants],
    )


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    requested_date: str | None = Query(default=None, alias='date'),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not requested_date or not requested_date.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Date is required',
        )

    try:
        on_date = date.fromisoformat(requested_date.strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid date',
        ) from exc

    try:
        appointments = AppointmentQueryService(db).list_for_user_on_date(
            current_user.id,
            current_user.email,
            on_date,
        )
        return [to_appointment_response(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise StoreError('Error retrieving appointments') from exc


@router.post('', response_model=AppointmentMutationResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentRequest,
    current_user: User = Depends(get_current_user),
    booking: BookingService = Depends(get_booking_service),
):
    try:
        appointment = booking.create(current_user.id, data.to_details())
        return AppointmentMutationResponse(
            message='Appointment created successfully',
            appointment=to_appointment_response(appointment),
        )
    except SQLAlchemyError as exc:
        raise StoreError('Error creating appointment') from exc


@router.put('/{appointment_id}', response_model=AppointmentMutationResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentRequest,
    current_user: User = Depends(get_current_user),
    booking: BookingService = Depends(get_booking_service),
):
    try:
        appointment = booking.update(current_user.id, appointment_id, data.to_details())
        return AppointmentMutationResponse(
            message='Appointment updated successfully',
            appointment=to_appointment_response(appointment),
        )
    except SQLAlchemyError as exc:
        raise StoreError('Error updating appointment') from exc


@router.delete('/{appointment_id}', response_model=DeleteAppointmentResponse)
def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    booking: BookingService = Depends(get_booking_service),
):
    booking.delete(current_user.id, appointment_id)
    return DeleteAppointmentResponse(message='Appointment deleted successfully')
