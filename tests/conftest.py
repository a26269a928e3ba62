import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from backend.auth.context import ActorContext, Role  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.consultant import Consultant  # noqa: E402
from backend.models.menstrual_cycle import CycleEntry, MenstrualCycle  # noqa: E402
from backend.models.user import User  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    tables = [
        User.__table__,
        Consultant.__table__,
        Appointment.__table__,
        MenstrualCycle.__table__,
        CycleEntry.__table__,
    ]
    Base.metadata.create_all(bind=engine, tables=tables)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=tables)


@pytest.fixture
def make_user(db):
    def _make_user(email: str, role: str = 'user', name: str | None = None, hashed_password: str = '') -> User:
        user = User(email=email, name=name or email.split('@')[0], role=role, hashed_password=hashed_password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_consultant(db, make_user):
    def _make_consultant(
        email: str = 'coach@example.com',
        mode_of_training: str = 'offline',
        price_per_session: float | None = 500.0,
    ) -> Consultant:
        linked_user = make_user(email, role='consultant')
        consultant = Consultant(
            user_id=linked_user.id,
            name='Coach Asha',
            specialty='Yoga Trainer',
            contact_email=email,
            mode_of_training=mode_of_training,
            price_per_session=price_per_session,
        )
        db.add(consultant)
        db.commit()
        db.refresh(consultant)
        return consultant

    return _make_consultant


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        user_id: int,
        consultant_id: int,
        start_at: datetime,
        end_at: datetime,
        status: str = 'pending',
    ) -> Appointment:
        appointment = Appointment(
            user_id=user_id,
            consultant_id=consultant_id,
            start_at=start_at,
            end_at=end_at,
            status=status,
            mode='online',
            last_modified_by=user_id,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture
def actor_for():
    def _actor_for(user: User) -> ActorContext:
        return ActorContext(actor_id=user.id, role=Role(user.role))

    return _actor_for
