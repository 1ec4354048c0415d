"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from wedvite.core.database import get_session
from wedvite.core.security import create_access_token, hash_password
from wedvite.main import app
from wedvite.models import Event, Invite, User
from wedvite.notifications.dispatcher import NotificationDispatcher
from wedvite.notifications.mailer import EmailDeliveryError, get_mailer

BASE_URL = "https://wedvite.test"


class FakeMailer:
    """Records outbound email instead of calling Resend."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    def send(self, to: str, subject: str, html: str) -> str:
        if to in self.fail_for:
            raise EmailDeliveryError(f"Rejected recipient {to}")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"msg_{len(self.sent)}"

    def recipients(self) -> list[str]:
        return [message["to"] for message in self.sent]

    def subjects_for(self, to: str) -> list[str]:
        return [message["subject"] for message in self.sent if message["to"] == to]


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="mailer")
def mailer_fixture() -> FakeMailer:
    return FakeMailer()


@pytest.fixture(name="dispatcher")
def dispatcher_fixture(mailer: FakeMailer) -> NotificationDispatcher:
    return NotificationDispatcher(mailer, BASE_URL)


@pytest.fixture(name="client")
def client_fixture(session: Session, mailer: FakeMailer):
    """Create a test client with the test database session and fake mailer."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="owner")
def owner_fixture(session: Session) -> User:
    """An event owner account."""
    user = User(name="Anna Host", email="anna@example.com", password_hash=hash_password("secret123"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(owner: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(owner.id)}"}


@pytest.fixture(name="other_owner_headers")
def other_owner_headers_fixture(session: Session) -> dict:
    """Bearer headers for a second owner who should not see the first owner's data."""
    user = User(name="Other Host", email="other@example.com", password_hash=hash_password("secret123"))
    session.add(user)
    session.commit()
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture(name="wedding")
def wedding_fixture(session: Session, owner: User) -> Event:
    """An upcoming wedding allowing two companions per guest."""
    event = Event(
        title="Anna & Tom's Wedding",
        date=datetime.now(UTC) + timedelta(days=30),
        time="4:30 PM",
        location="Lakeside Pavilion",
        guest_limit=2,
        user_id=owner.id,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="past_event")
def past_event_fixture(session: Session, owner: User) -> Event:
    """An event that took place yesterday."""
    event = Event(
        title="Rehearsal Dinner",
        date=datetime.now(UTC) - timedelta(days=1),
        location="Trattoria",
        guest_limit=2,
        user_id=owner.id,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="invite")
def invite_fixture(session: Session, wedding: Event) -> Invite:
    """A pending guest with a canonical token."""
    invite = Invite(
        guest_name="Grace Guest",
        email="grace@example.com",
        qr_code="tok_grace_123",
        event_id=wedding.id,
    )
    session.add(invite)
    session.commit()
    session.refresh(invite)
    return invite


@pytest.fixture(name="past_invite")
def past_invite_fixture(session: Session, past_event: Event) -> Invite:
    invite = Invite(
        guest_name="Late Larry",
        email="larry@example.com",
        qr_code="tok_larry_456",
        event_id=past_event.id,
    )
    session.add(invite)
    session.commit()
    session.refresh(invite)
    return invite
