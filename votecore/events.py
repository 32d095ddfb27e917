"""Broadcast of election state changes to external subscribers."""

import itertools
import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    VOTER_REGISTERED = "VoterRegistered"
    VOTING_STARTED = "VotingStarted"
    VOTE_CAST = "VoteCast"
    VOTING_ENDED = "VotingEnded"
    RESULTS_PUBLISHED = "ResultsPublished"


@dataclass(frozen=True)
class Event:
    """A single published notification.

    Attributes:
        kind: What happened
        sequence: Position in the bus's publication order (starts at 1)
        payload: Kind-specific data, e.g. {"partyIndex": 0} for VoteCast
        published_at: Wall-clock time of publication (UTC)
    """
    kind: EventKind
    sequence: int
    payload: dict[str, Any] = field(default_factory=dict)
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sequence": self.sequence,
            "payload": self.payload,
            "published_at": self.published_at.isoformat(),
        }


class Subscription:
    """A subscriber's stream of events.

    Events are queued as they are published; the subscriber reads them with
    ``get`` (blocking, optional timeout) or ``drain`` (non-blocking). A
    bounded subscription that falls behind loses new events rather than
    slowing the publisher; ``dropped`` counts how many.
    """

    def __init__(self, handle: int, kinds: frozenset[EventKind], maxsize: int = 0):
        self.handle = handle
        self.kinds = kinds
        self.dropped = 0
        self.closed = False
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=maxsize)

    def wants(self, kind: EventKind) -> bool:
        return not self.kinds or kind in self.kinds

    def offer(self, event: Event) -> bool:
        """Queue an event without blocking. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1
            return False
        return True

    def get(self, timeout: float | None = None) -> Event:
        """Wait for the next event.

        Raises:
            queue.Empty: If no event arrives within ``timeout`` seconds.
        """
        return self._queue.get(timeout=timeout)

    def drain(self) -> list[Event]:
        """Return every event queued so far, without waiting."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def __iter__(self) -> Iterator[Event]:
        return iter(self.drain())

    def __len__(self) -> int:
        return self._queue.qsize()


class EventBus:
    """Fan-out of events to subscriptions, in publication order.

    Publishing never blocks and never raises because of a subscriber, so a
    slow dashboard cannot stall a command. Late subscribers do not get
    earlier events.
    """

    def __init__(self, maxsize: int = 0):
        self.maxsize = maxsize
        self._subscriptions: dict[int, Subscription] = {}
        self._handles = itertools.count(1)
        self._sequence = 0
        self._lock = threading.Lock()

    def subscribe(self, *kinds: EventKind | str, maxsize: int | None = None) -> Subscription:
        """Subscribe to the given event kinds (all kinds if none are given)."""
        wanted = frozenset(EventKind(k) for k in kinds)
        with self._lock:
            subscription = Subscription(
                next(self._handles), wanted,
                self.maxsize if maxsize is None else maxsize,
            )
            self._subscriptions[subscription.handle] = subscription
        logger.debug("subscription %d opened for %s", subscription.handle,
                     sorted(k.value for k in wanted) or "all events")
        return subscription

    def unsubscribe(self, subscription: Subscription | int) -> bool:
        """Close a subscription. Returns False if it was not open."""
        handle = subscription.handle if isinstance(subscription, Subscription) else subscription
        with self._lock:
            removed = self._subscriptions.pop(handle, None)
        if removed is None:
            return False
        removed.closed = True
        logger.debug("subscription %d closed", handle)
        return True

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, kind: EventKind, /, **payload) -> Event:
        with self._lock:
            self._sequence += 1
            event = Event(kind=kind, sequence=self._sequence, payload=payload)
            targets = [s for s in self._subscriptions.values() if s.wants(kind)]
            for subscription in targets:
                if not subscription.offer(event):
                    logger.warning(
                        "subscription %d is full, dropped %s #%d",
                        subscription.handle, kind.value, event.sequence,
                    )
        return event


class NotificationLatch:
    """Consumer-side deduplication of repeated notifications.

    Keeps an "already handled" flag for VotingStarted and VotingEnded,
    each cleared by the complementary transition, so repeated deliveries
    of the same phase change produce a single notification. Any event with
    a sequence number already seen is also suppressed.
    """

    COMPLEMENTS = {
        EventKind.VOTING_STARTED: EventKind.VOTING_ENDED,
        EventKind.VOTING_ENDED: EventKind.VOTING_STARTED,
    }

    def __init__(self):
        self.handled: dict[EventKind, bool] = {kind: False for kind in self.COMPLEMENTS}
        self._last_sequence = 0

    def should_handle(self, event: Event) -> bool:
        if event.sequence <= self._last_sequence:
            return False
        self._last_sequence = event.sequence

        if event.kind not in self.COMPLEMENTS:
            return True
        if self.handled[event.kind]:
            return False
        self.handled[event.kind] = True
        self.handled[self.COMPLEMENTS[event.kind]] = False
        return True
