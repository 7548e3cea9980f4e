from __future__ import annotations

from typing import Dict, List

import anyio

__all__ = ["MessageLog"]


class MessageLog:
    """Append-only plaintext messages per client hash, in arrival order."""

    def __init__(self) -> None:
        self._messages: Dict[str, List[str]] = {}
        self._locks: Dict[str, anyio.Lock] = {}

    def _lock_for(self, client_hash: str) -> anyio.Lock:
        lock = self._locks.get(client_hash)
        if lock is None:
            lock = self._locks[client_hash] = anyio.Lock()
        return lock

    async def append(self, client_hash: str, text: str) -> int:
        """Append ``text`` and return the new number of messages for the hash."""
        async with self._lock_for(client_hash):
            messages = self._messages.setdefault(client_hash, [])
            messages.append(text)
            return len(messages)

    def get_messages(self, client_hash: str) -> List[str]:
        return list(self._messages.get(client_hash, ()))

    def __contains__(self, client_hash: object) -> bool:
        return client_hash in self._messages
