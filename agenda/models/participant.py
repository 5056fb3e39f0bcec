"""Appointment participant model and participant identity types."""

from dataclasses import dataclass

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from agenda.database import Base


@dataclass(frozen=True)
class ResolvedParticipant:
    """A participant whose email matched a registered user at write time."""
    email: str
    user_id: int
    name: str | None = None


@dataclass(frozen=True)
class UnresolvedParticipant:
    """A participant known only by email."""
    email: str


ParticipantRef = ResolvedParticipant | UnresolvedParticipant


class AppointmentParticipant(Base):
    """Represents one invitee row of an appointment roster."""
    __tablename__ = "appointment_participants"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(Integer, ForeignKey("users.id"))
    email = Column(String, nullable=False)
    is_confirmed = Column(Boolean, nullable=False, default=False)

    appointment = relationship("Appointment", back_populates="participants")
    user = relationship("User")

    @property
    def identity(self) -> ParticipantRef:
        if self.user_id is None:
            return UnresolvedParticipant(email=self.email)
        name = self.user.name if self.user is not None else None
        return ResolvedParticipant(email=self.email, user_id=self.user_id, name=name)
