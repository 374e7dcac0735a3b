"""Bayeux session identity and retry bookkeeping."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class Session:
    """
    Client identity negotiated by the handshake.

    Holds the server-assigned client id, the cookies captured from the
    handshake reply, and the retry counter of the operation in progress.
    Only the engine binds a session; only the owner resets it.
    """

    def __init__(self, max_retries: int = 3):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self._client_id: str | None = None
        self._cookies: list[str] = []
        self._retry_count = 0

    @property
    def client_id(self) -> str | None:
        """Server-assigned client id, or None before a handshake."""
        return self._client_id

    @property
    def cookies(self) -> list[str]:
        """Cookies attached to every request after the handshake."""
        return list(self._cookies)

    @property
    def is_bound(self) -> bool:
        return self._client_id is not None

    @property
    def retry_count(self) -> int:
        """Retries spent by the current operation."""
        return self._retry_count

    def bind(self, client_id: str, cookies: list[str]) -> None:
        """
        Bind the session after a successful handshake.

        Cookies replace the previous ones; a new handshake means a new
        server-side session.
        """
        self._client_id = client_id
        self._cookies = list(cookies)
        logger.debug(f"Session bound to client {client_id}")

    def begin_operation(self) -> None:
        self._retry_count = 0

    def record_retry(self) -> int:
        """Count a failed attempt and return the new counter."""
        self._retry_count += 1
        return self._retry_count

    def end_operation(self) -> None:
        self._retry_count = 0

    def reset(self) -> None:
        """Forget the client id and cookies."""
        self._client_id = None
        self._cookies = []
        self._retry_count = 0

    def __repr__(self) -> str:
        return (
            f"Session(client_id={self._client_id!r}, cookies={len(self._cookies)}, "
            f"retry_count={self._retry_count}, max_retries={self.max_retries})"
        )
