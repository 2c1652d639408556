"""API key rotation across a fixed pool of interchangeable credentials."""

from __future__ import annotations

import logging
import random

logger = logging.getLogger(__name__)


class CredentialPool:
    """Hands out the least-used credential, avoiding back-to-back reuse.

    Selection is synchronous, so concurrent coroutines sharing one pool see
    each selection as atomic.
    """

    def __init__(self, credentials: list[str], rng: random.Random | None = None) -> None:
        if not credentials:
            raise ValueError("Credential pool must contain at least one key")
        self.credentials = list(credentials)
        self.usage_counts = [0] * len(self.credentials)
        self.last_used_index: int | None = None
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.credentials)

    def select_credential(self) -> str:
        min_usage = min(self.usage_counts)
        candidates = [
            i
            for i, count in enumerate(self.usage_counts)
            if count == min_usage and i != self.last_used_index
        ]

        if candidates:
            index = self._rng.choice(candidates)
        else:
            # Only the last-used key sits at the minimum (or the pool has one
            # key): pick from the whole pool so selection always progresses.
            index = self._rng.randrange(len(self.credentials))

        self.usage_counts[index] += 1
        self.last_used_index = index
        logger.debug("Selected credential %d (usage=%s)", index, self.usage_counts)
        return self.credentials[index]
