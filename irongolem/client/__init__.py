"""Client runtime: lifecycle, outbound pacing and event surface."""

from .core import GolemClient
from .events import ClientEvent, EventBus
from .outbound_queue import OutboundQueue, QueueEntry
from .protocols import (
    CredentialStore,
    Transport,
    TransportEvent,
    TransportFactory,
    TransportOptions,
)
from .state import (
    ConnectionState,
    ConnectionStateMachine,
    TerminationCause,
    TerminationKind,
)
from .timers import CancellableTimer

__all__ = [
    "GolemClient",
    "ClientEvent",
    "EventBus",
    "OutboundQueue",
    "QueueEntry",
    "CredentialStore",
    "Transport",
    "TransportEvent",
    "TransportFactory",
    "TransportOptions",
    "ConnectionState",
    "ConnectionStateMachine",
    "TerminationCause",
    "TerminationKind",
    "CancellableTimer",
]
