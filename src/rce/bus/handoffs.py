"""Bounded bus for cross-expert hand-offs."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable

from rce.core.types import Handoff

logger = logging.getLogger(__name__)


class HandoffBus:
    """Queue with dedupe, per-recipient limit and recipient allow-list."""

    def __init__(self, recipients: Iterable[str], *, per_domain_limit: int = 4) -> None:
        self.recipients = frozenset(recipients)
        self.per_domain_limit = per_domain_limit
        self._queue: deque[Handoff] = deque()
        self._seen: set[str] = set()

    def enqueue(self, handoff: Handoff) -> bool:
        """Enqueue a hand-off once; unknown recipients and self-addressed signals are dropped."""
        if handoff.to_domain not in self.recipients or handoff.to_domain == handoff.from_domain:
            logger.info(
                "handoff_dropped from=%s to=%s kind=%s",
                handoff.from_domain,
                handoff.to_domain,
                handoff.kind,
            )
            return False
        key = handoff.key()
        if key in self._seen:
            return False
        self._seen.add(key)
        self._queue.append(handoff)
        return True

    def enqueue_all(self, handoffs: Iterable[Handoff]) -> int:
        return sum(1 for handoff in handoffs if self.enqueue(handoff))

    def drain(self) -> dict[str, list[Handoff]]:
        """Drain the queue, grouped by recipient domain."""
        grouped: dict[str, list[Handoff]] = defaultdict(list)
        while self._queue:
            handoff = self._queue.popleft()
            inbox = grouped[handoff.to_domain]
            if len(inbox) >= self.per_domain_limit:
                continue
            inbox.append(handoff)
        return grouped

    def deliver(self) -> tuple[Handoff, ...]:
        """Drain into a flat tuple preserving enqueue order per recipient."""
        return tuple(handoff for inbox in self.drain().values() for handoff in inbox)

    def __len__(self) -> int:
        return len(self._queue)
