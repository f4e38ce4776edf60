"""Participant identity: a registered user id or a free-text guest name."""

from __future__ import annotations

from dataclasses import dataclass

ANONYMOUS_DISPLAY_NAME = "Anonymous"


@dataclass(frozen=True, slots=True)
class RegisteredIdentity:
    """Participant known by a registered user id."""

    user_id: int

    def display_name(self) -> str:
        return f"User {self.user_id}"

    def as_columns(self) -> dict[str, int | str | None]:
        return {"user_id": self.user_id, "guest_name": None}


@dataclass(frozen=True, slots=True)
class GuestIdentity:
    """Anonymous participant known only by a display name."""

    name: str

    def display_name(self) -> str:
        return self.name

    def as_columns(self) -> dict[str, int | str | None]:
        return {"user_id": None, "guest_name": self.name}


Identity = RegisteredIdentity | GuestIdentity


def identity_from_fields(user_id: int | None, guest_name: str | None) -> Identity | None:
    """Resolve the wire/row pair of optional fields; a user id wins over a guest name."""

    if user_id is not None:
        return RegisteredIdentity(user_id=int(user_id))
    name = (guest_name or "").strip()
    if name:
        return GuestIdentity(name=name)
    return None


def display_name_for(identity: Identity | None) -> str:
    """Human-readable attribution, falling back to "Anonymous"."""

    if identity is None:
        return ANONYMOUS_DISPLAY_NAME
    return identity.display_name()
