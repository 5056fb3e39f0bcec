import pytest
from sqlalchemy import event

from agenda.models.participant import ResolvedParticipant, UnresolvedParticipant
from agenda.services.errors import UnknownParticipantsError
from agenda.services.participants import ParticipantResolver, normalize_emails


def test_normalize_emails_trims_and_drops_blanks() -> None:
    assert normalize_emails([' a@x.com ', '', None, '  ', 'b@x.com', 'a@x.com']) == [
        'a@x.com',
        'b@x.com',
        'a@x.com',
    ]


def test_resolve_returns_only_known_accounts(appointment_db, users) -> None:
    resolver = ParticipantResolver(appointment_db)

    resolved = resolver.resolve(['u2@x.com', ' u3@x.com ', 'ghost@x.com'])

    assert resolved == {
        'u2@x.com': ResolvedParticipant(email='u2@x.com', user_id=users['u2'].id, name='Bruno Costa'),
        'u3@x.com': ResolvedParticipant(email='u3@x.com', user_id=users['u3'].id, name='Chloe Dubois'),
    }


def test_resolve_without_emails_skips_the_lookup(appointment_db, appointment_engine) -> None:
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(appointment_engine, 'before_cursor_execute', record)
    try:
        assert ParticipantResolver(appointment_db).resolve(['', '  ']) == {}
    finally:
        event.remove(appointment_engine, 'before_cursor_execute', record)

    assert statements == []


def test_resolve_issues_a_single_batched_query(appointment_db, appointment_engine, users) -> None:
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(appointment_engine, 'before_cursor_execute', record)
    try:
        ParticipantResolver(appointment_db).resolve(['u1@x.com', 'u2@x.com', 'u3@x.com', 'ghost@x.com'])
    finally:
        event.remove(appointment_engine, 'before_cursor_execute', record)

    assert len([statement for statement in statements if 'FROM users' in statement]) == 1


def test_resolve_matches_emails_exactly(appointment_db, users) -> None:
    assert ParticipantResolver(appointment_db).resolve(['U2@X.COM']) == {}


def test_build_roster_strict_lists_every_unknown_email(appointment_db, users) -> None:
    resolver = ParticipantResolver(appointment_db)

    with pytest.raises(UnknownParticipantsError) as exception_info:
        resolver.build_roster(['ghost@x.com', 'u2@x.com', 'nobody@x.com', ' ghost@x.com'], strict=True)

    assert exception_info.value.unknown_participants == ['ghost@x.com', 'nobody@x.com']
    assert exception_info.value.to_payload() == {
        'error': 'Some participants are not registered users',
        'code': 'UNKNOWN_PARTICIPANTS',
        'unknownParticipants': ['ghost@x.com', 'nobody@x.com'],
    }


def test_build_roster_lenient_keeps_unknown_emails_unresolved(appointment_db, users) -> None:
    roster = ParticipantResolver(appointment_db).build_roster(['guest@x.com', 'u2@x.com'], strict=False)

    assert roster == [
        UnresolvedParticipant(email='guest@x.com'),
        ResolvedParticipant(email='u2@x.com', user_id=users['u2'].id, name='Bruno Costa'),
    ]
