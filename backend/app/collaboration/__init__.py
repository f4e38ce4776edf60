"""Real-time collaboration core: identities, sessions and broadcast fan-out.

The message protocol lives in `app.collaboration.protocol`; it depends on the
storage services and is not re-exported here.
"""

from app.collaboration.broadcast import BroadcastRouter
from app.collaboration.identity import GuestIdentity, Identity, RegisteredIdentity, display_name_for, identity_from_fields
from app.collaboration.registry import Session, SessionRegistry, SessionState, Transport

__all__ = [
    "BroadcastRouter",
    "GuestIdentity",
    "Identity",
    "RegisteredIdentity",
    "Session",
    "SessionRegistry",
    "SessionState",
    "Transport",
    "display_name_for",
    "identity_from_fields",
]
