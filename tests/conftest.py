"""Pytest configuration and fixtures."""

import random
from dataclasses import replace

import pytest

from config import load_config
from database import InMemoryStore, SQLiteStore
from services import (
    ConsoleNotifier,
    NotificationService,
    RoomDraw,
    SelectionLedger,
    StaticParticipantSource,
    build_services,
)
from services.notifier import Notifier, Receipt
from core.exceptions import NotificationFailure


PARTICIPANTS = [
    "Alice Johnson",
    "Bob Smith",
    "Charlie Brown",
    "Diana Prince",
    "Edward Norton",
]


class FlakyNotifier(Notifier):
    """Fails for the configured recipients and records every attempt."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.attempts = []

    def _deliver(self, message):
        self.attempts.append(message)
        if message.to in self.failing:
            raise NotificationFailure(message.to, "mailbox unavailable")
        return Receipt(message_id=f"<{len(self.attempts)}@test>")


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Configuration isolated from the developer's environment."""
    for name in ("EMAIL_SERVICE", "SENDGRID_API_KEY", "SMTP_USER", "SMTP_PASS", "TRUST_PROXY"):
        monkeypatch.delenv(name, raising=False)
    return replace(
        load_config(),
        environment="testing",
        database_path=str(tmp_path / "picker.sqlite"),
        participants_file=str(tmp_path / "participants.json"),
        admin_username="admin",
        admin_password="s3cret",
        rate_limit_max=1000,
    )


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteStore(str(tmp_path / "ledger.sqlite"))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Every store implementation."""
    if request.param == "memory":
        return InMemoryStore()
    return SQLiteStore(str(tmp_path / "ledger.sqlite"))


@pytest.fixture
def participants():
    return StaticParticipantSource(PARTICIPANTS)


@pytest.fixture
def ledger(store, participants):
    return SelectionLedger(store, participants, rng=random.Random(1234))


@pytest.fixture
def notifier():
    return FlakyNotifier()


@pytest.fixture
def rooms(store, notifier):
    return RoomDraw(store, NotificationService(notifier), rng=random.Random(42))


@pytest.fixture
def console_notifier():
    return ConsoleNotifier()


@pytest.fixture
def services(config, memory_store, participants, console_notifier):
    return build_services(
        config,
        store=memory_store,
        participants=participants,
        notifier=console_notifier,
    )


@pytest.fixture
def app(config, services):
    from web import create_app

    return create_app(config, services=services, testing=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_auth():
    return ("admin", "s3cret")
