"""Pytest configuration and shared fixtures."""

import uuid

import pytest
from rest_framework.test import APIClient

from tests.fakes import (
    NOW,
    FakeCredentials,
    FakeTransactionManager,
    InMemoryDatabase,
    InMemoryEventStore,
    InMemoryRegistrationStore,
    InMemoryTicketStore,
    RecordingNotifier,
)
from ticketing.domain import Actor, Role, UserId
from ticketing.services.access import EventOrganizerDirectory
from ticketing.services.pipeline import Pipeline, build_pipeline
from ticketing.stores.django_store import (
    DjangoEventStore,
    DjangoRegistrationStore,
    DjangoTicketStore,
    DjangoTransactionManager,
)


def make_actor(role: Role = Role.STUDENT) -> Actor:
    return Actor(user_id=UserId(uuid.uuid4()), role=role)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def credentials() -> FakeCredentials:
    return FakeCredentials()


@pytest.fixture
def pipeline(
    memory_db: InMemoryDatabase, notifier: RecordingNotifier, credentials: FakeCredentials
) -> Pipeline:
    return build_pipeline(
        tx=FakeTransactionManager(memory_db),
        events=InMemoryEventStore(memory_db),
        registrations=InMemoryRegistrationStore(memory_db),
        tickets=InMemoryTicketStore(memory_db),
        notifier=notifier,
        directory=EventOrganizerDirectory(),
        credentials=credentials,
        clock=lambda: NOW,
    )


@pytest.fixture
def orm_pipeline(notifier: RecordingNotifier, credentials: FakeCredentials) -> Pipeline:
    return build_pipeline(
        tx=DjangoTransactionManager(),
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        tickets=DjangoTicketStore(),
        notifier=notifier,
        directory=EventOrganizerDirectory(),
        credentials=credentials,
    )


@pytest.fixture
def student() -> Actor:
    return make_actor()


@pytest.fixture
def other_student() -> Actor:
    return make_actor()


@pytest.fixture
def organizer() -> Actor:
    return make_actor(Role.ORGANIZER)


@pytest.fixture
def admin() -> Actor:
    return make_actor(Role.ADMIN)
