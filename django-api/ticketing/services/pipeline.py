"""Service wiring.

Handlers resolve their services through ``default_pipeline()``; tests build
their own pipeline over in-memory stores with ``build_pipeline``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from django.utils import timezone

from ticketing.services.access import EventOrganizerDirectory, OrganizationDirectory
from ticketing.services.capacity_ledger import CapacityLedger
from ticketing.services.credentials import CredentialFactory
from ticketing.services.event_service import EventService
from ticketing.services.notifications import Notifier, SignalNotifier
from ticketing.services.registration_service import RegistrationService
from ticketing.services.scan_validator import ScanValidator
from ticketing.services.ticket_issuer import TicketIssuer
from ticketing.services.waitlist_promoter import WaitlistPromoter
from ticketing.stores.interfaces import (
    EventStore,
    RegistrationStore,
    TicketStore,
    TransactionManager,
)


@dataclass(frozen=True)
class Pipeline:
    """The wired set of ticketing services."""

    ledger: CapacityLedger
    promoter: WaitlistPromoter
    registrations: RegistrationService
    tickets: TicketIssuer
    scans: ScanValidator
    events: EventService


def build_pipeline(
    tx: TransactionManager,
    events: EventStore,
    registrations: RegistrationStore,
    tickets: TicketStore,
    notifier: Notifier,
    directory: OrganizationDirectory,
    credentials: CredentialFactory,
    clock: Callable[[], datetime] = timezone.now,
) -> Pipeline:
    ledger = CapacityLedger(tx, events, clock=clock)
    promoter = WaitlistPromoter(tx, ledger, registrations, notifier)
    return Pipeline(
        ledger=ledger,
        promoter=promoter,
        registrations=RegistrationService(
            tx,
            events,
            registrations,
            tickets,
            ledger,
            promoter,
            notifier,
            directory,
            clock=clock,
        ),
        tickets=TicketIssuer(
            tx,
            events,
            registrations,
            tickets,
            ledger,
            promoter,
            credentials,
            directory,
            clock=clock,
        ),
        scans=ScanValidator(tx, events, tickets, notifier, directory, clock=clock),
        events=EventService(
            tx, events, registrations, tickets, ledger, promoter, directory, clock=clock
        ),
    )


@lru_cache(maxsize=1)
def default_pipeline() -> Pipeline:
    from ticketing.stores.django_store import (
        DjangoEventStore,
        DjangoRegistrationStore,
        DjangoTicketStore,
        DjangoTransactionManager,
    )

    return build_pipeline(
        tx=DjangoTransactionManager(),
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        tickets=DjangoTicketStore(),
        notifier=SignalNotifier(),
        directory=EventOrganizerDirectory(),
        credentials=CredentialFactory(),
    )
