import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.database import Base
from agenda.models.appointment import Appointment
from agenda.models.participant import AppointmentParticipant
from agenda.models.user import User

TABLES = [User.__table__, Appointment.__table__, AppointmentParticipant.__table__]


@pytest.fixture
def appointment_engine():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def appointment_db(appointment_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=appointment_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def users(appointment_db):
    accounts = {
        'u1': User(name='Alice Martin', email='u1@x.com'),
        'u2': User(name='Bruno Costa', email='u2@x.com'),
        'u3': User(name='Chloe Dubois', email='u3@x.com'),
    }
    appointment_db.add_all(accounts.values())
    appointment_db.commit()
    for account in accounts.values():
        appointment_db.refresh(account)
    return accounts
