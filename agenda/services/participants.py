from collections.abc import Iterable

from sqlalchemy.orm import Session

from agenda.models.participant import ParticipantRef, ResolvedParticipant, UnresolvedParticipant
from agenda.models.user import User
from agenda.services.errors import UnknownParticipantsError


def normalize_emails(raw_emails: Iterable[str | None]) -> list[str]:
    """Trim emails and drop blanks, keeping submission order and duplicates."""
    normalized: list[str] = []
    for email in raw_emails:
        if email is None:
            continue
        trimmed = email.strip()
        if trimmed:
            normalized.append(trimmed)
    return normalized


class ParticipantResolver:
    """Maps participant emails to registered user accounts."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def resolve(self, emails: Iterable[str]) -> dict[str, ResolvedParticipant]:
        distinct_emails = set(normalize_emails(emails))
        if not distinct_emails:
            return {}

        users = self._db.query(User.id, User.email, User.name).filter(
            User.email.in_(sorted(distinct_emails)),
        ).all()

        return {
            email: ResolvedParticipant(email=email, user_id=user_id, name=name)
            for user_id, email, name in users
        }

    def build_roster(self, emails: Iterable[str | None], *, strict: bool) -> list[ParticipantRef]:
        """Resolve a submitted email list into a roster.

        With ``strict`` any unknown email fails the whole roster; otherwise unknown
        emails become :class:`UnresolvedParticipant` entries.
        """
        normalized = normalize_emails(emails)
        resolved = self.resolve(normalized)

        unknown_emails = list(dict.fromkeys(email for email in normalized if email not in resolved))
        if strict and unknown_emails:
            raise UnknownParticipantsError(unknown_emails)

        return [resolved.get(email) or UnresolvedParticipant(email=email) for email in normalized]
