"""Testing – fakes and property-based generators for mp-access users' test suites."""
from mp_access.testing.fakes import (
    InMemoryAccessEventSink,
    InMemoryIdentityProvider,
    InMemoryNotificationChannel,
)

__all__ = [
    "InMemoryAccessEventSink",
    "InMemoryIdentityProvider",
    "InMemoryNotificationChannel",
]
