"""Testing fakes – in-memory doubles for the external collaborators."""
from mp_access.application.notifications import InMemoryNotificationChannel
from mp_access.kernel.security import InMemoryAccessEventSink
from mp_access.testing.fakes.identity_provider import InMemoryIdentityProvider

__all__ = [
    "InMemoryAccessEventSink",
    "InMemoryIdentityProvider",
    "InMemoryNotificationChannel",
]
