"""In-memory pairing store.

Holds pending host sessions keyed by id, with a reverse index by
description so a host that republishes the same description gets its
previous session replaced instead of duplicated.

Republishing is an explicit upsert: reusing an id or a description
deletes whatever session currently holds it before the new one is
inserted with a fresh creation time.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Iterator, Optional

from rendezvous.errors import ConflictError, InvalidArgumentError, NotFoundError
from rendezvous.session import HostSession, generate_session_id

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_TTL_SECONDS = 600.0


class PairingStore:
    """Thread-safe table of host sessions with capacity and TTL eviction.

    Every public method runs under a single lock, so the sweep and each
    operation are mutually exclusive. The id and description maps are
    only ever changed together through _insert/_remove.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = generate_session_id,
    ):
        """Initialize empty store.

        Args:
            capacity: Maximum number of live sessions kept by a sweep.
            ttl_seconds: Age after which a session is swept.
            clock: Returns the current Unix timestamp.
            id_factory: Generates candidate session ids.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive: {capacity}")

        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._id_factory = id_factory
        self._hosts: dict[str, HostSession] = {}
        self._hosts_rev: dict[str, str] = {}
        self._lock = threading.Lock()

    def evict(self) -> int:
        """Remove sessions over capacity, or else expired ones.

        When over capacity the oldest excess sessions go regardless of
        age. Otherwise sessions are dropped oldest first until the first
        one still inside the TTL.

        Returns:
            Number of sessions removed.
        """
        with self._lock:
            entries = sorted(self._hosts.values(), key=lambda s: s.created_at)
            before = len(entries)

            if before > self.capacity:
                for session in entries[: before - self.capacity]:
                    self._remove(session.session_id)
            else:
                now = self._clock()
                for session in entries:
                    if not session.is_expired(self.ttl_seconds, now):
                        break
                    self._remove(session.session_id)

            after = len(self._hosts)

        if after != before:
            logger.info(f"freed up hosts from {before} to {after}")
        return before - after

    def publish_host(
        self, description: str, session_id: Optional[str] = None
    ) -> str:
        """Create or replace the session for a host.

        Args:
            description: Host connection description.
            session_id: Id to publish under. Defaults to the id already
                holding this description, or a freshly generated one.

        Returns:
            Id of the new session.

        Raises:
            InvalidArgumentError: If description is empty.
        """
        if not description:
            raise InvalidArgumentError("when creating the host: empty description")

        with self._lock:
            resolved_id = session_id or self._hosts_rev.get(description, "")

            if resolved_id in self._hosts:
                self._remove(resolved_id)
            previous_id = self._hosts_rev.get(description)
            if previous_id is not None:
                self._remove(previous_id)

            if not resolved_id:
                resolved_id = self._id_factory()
                while resolved_id in self._hosts:
                    resolved_id = self._id_factory()

            self._insert(
                HostSession(
                    session_id=resolved_id,
                    description=description,
                    created_at=self._clock(),
                )
            )

        logger.info(f"host id: {resolved_id}")
        logger.debug(f"host sdp description: {description}")
        return resolved_id

    def fetch_host(self, session_id: str) -> HostSession:
        """Look up an unpaired host.

        Args:
            session_id: Host session id.

        Returns:
            Copy of the session.

        Raises:
            NotFoundError: If no session exists for the id.
            ConflictError: If a guest has already paired with the host.
        """
        with self._lock:
            session = self._hosts.get(session_id) if session_id else None
            if session is None:
                raise NotFoundError(
                    "when checking the host: empty or unknown host id"
                )
            if session.is_paired:
                raise ConflictError(
                    f"when checking the host: host is already in a call: {session_id}"
                )
            return replace(session)

    def publish_guest(self, host_id: str, guest_description: str) -> None:
        """Attach a guest description to a host session.

        A second publish before the host fetches the first one overwrites it.

        Args:
            host_id: Host session id.
            guest_description: Guest connection description.

        Raises:
            InvalidArgumentError: If either argument is empty.
            NotFoundError: If the host has no live session.
        """
        if not host_id:
            raise InvalidArgumentError("when creating the guest: empty hostId")
        if not guest_description:
            raise InvalidArgumentError(
                "when creating the guest: empty guestDescription"
            )

        with self._lock:
            session = self._hosts.get(host_id)
            if session is None:
                raise NotFoundError(
                    f"when creating the guest: host not found: {host_id}"
                )
            if session.is_paired:
                logger.warning(f"Overwriting pending guest description for {host_id}")
            session.guest_description = guest_description

        logger.info(f"guest paired with host id: {host_id}")
        logger.debug(f"guest sdp description: {guest_description}")

    def fetch_guest(self, host_id: str) -> str:
        """Poll for a guest description, handing it off at most once.

        Args:
            host_id: Host session id.

        Returns:
            Guest description, or "" if no guest has published yet.
            A non-empty result removes the session.

        Raises:
            InvalidArgumentError: If host_id is empty.
            NotFoundError: If the host has no live session.
        """
        if not host_id:
            raise InvalidArgumentError("when checking for a guest: empty hostId")

        with self._lock:
            session = self._hosts.get(host_id)
            if session is None:
                raise NotFoundError(
                    f"when checking for a guest: host not found: {host_id}"
                )
            guest_description = session.guest_description
            if guest_description:
                self._remove(host_id)

        if guest_description:
            logger.info(f"handed off guest description for host id: {host_id}")
        return guest_description

    def dump(self) -> Iterator[HostSession]:
        """Iterate over copies of all live sessions.

        The snapshot is taken on first iteration.
        """
        with self._lock:
            snapshot = [replace(session) for session in self._hosts.values()]
        yield from snapshot

    def get(self, session_id: str) -> Optional[HostSession]:
        """Get a copy of a session by id, or None."""
        with self._lock:
            session = self._hosts.get(session_id)
            return replace(session) if session is not None else None

    def id_for_description(self, description: str) -> Optional[str]:
        """Get the id currently published for a description, or None."""
        with self._lock:
            return self._hosts_rev.get(description)

    def __len__(self) -> int:
        """Return number of live sessions."""
        with self._lock:
            return len(self._hosts)

    def __contains__(self, session_id: str) -> bool:
        """Check if a session exists for the id."""
        with self._lock:
            return session_id in self._hosts

    def _insert(self, session: HostSession) -> None:
        self._hosts[session.session_id] = session
        self._hosts_rev[session.description] = session.session_id

    def _remove(self, session_id: str) -> None:
        session = self._hosts.pop(session_id, None)
        if session is not None:
            if self._hosts_rev.get(session.description) == session_id:
                del self._hosts_rev[session.description]
