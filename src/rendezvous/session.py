"""Host session record held by the pairing store."""

import secrets
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


def generate_session_id() -> str:
    """Generate a random host session id.

    Returns:
        Two groups of 8 hex chars separated by a space.
    """
    return f"{secrets.token_hex(4)} {secrets.token_hex(4)}"


@dataclass
class HostSession:
    """A published host waiting for a guest.

    Attributes:
        session_id: Opaque unique token, primary key in the store.
        description: Host connection description (e.g. an SDP offer).
        guest_description: Guest answer, empty until a guest publishes.
        created_at: Unix timestamp when the session was (re)created.
    """

    session_id: str
    description: str
    guest_description: str = ""
    created_at: float = field(default_factory=time.time)

    @property
    def is_paired(self) -> bool:
        """True once a guest description has been attached."""
        return bool(self.guest_description)

    def age(self, now: float) -> float:
        """Seconds elapsed since creation."""
        return now - self.created_at

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        """Check if the session has outlived the TTL.

        Args:
            ttl_seconds: Time-to-live in seconds.
            now: Current Unix timestamp.

        Returns:
            True if age strictly exceeds the TTL.
        """
        return self.age(now) > ttl_seconds

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the debug endpoint."""
        data = asdict(self)
        return {
            "id": data["session_id"],
            "description": data["description"],
            "guestDescription": data["guest_description"],
            "createdAt": datetime.fromtimestamp(
                self.created_at, tz=timezone.utc
            ).isoformat(),
        }
