"""
In-process change feed.

Services publish a ``ChangeEvent`` after every committed mutation. Clients
subscribe per household (optionally filtered by table name) and refetch
whatever they display when an event arrives; events say *that* a table
changed, never *what* changed.
"""
import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, Optional, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    household_id: int
    action: str = "update"

    def to_dict(self) -> dict:
        return asdict(self)


class Subscription:
    """A subscriber's bounded queue. When full, the oldest event is dropped."""

    def __init__(self, household_id: int, tables: Optional[Iterable[str]] = None, maxsize: int = 100):
        self.household_id = household_id
        self.tables = frozenset(tables) if tables else None
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._loop = asyncio.get_running_loop()

    def matches(self, event: ChangeEvent) -> bool:
        if event.household_id != self.household_id:
            return False
        return self.tables is None or event.table in self.tables

    def push(self, event: ChangeEvent) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._put(event)
        else:
            self._loop.call_soon_threadsafe(self._put, event)

    def _put(self, event: ChangeEvent) -> None:
        if self.queue.full():
            self.queue.get_nowait()
            logger.debug("Dropped oldest change event for household %s", self.household_id)
        self.queue.put_nowait(event)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()


class ChangeNotifier:
    """Fan-out of change events to the subscribers of each household."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscriptions: Dict[int, Set[Subscription]] = defaultdict(set)

    def subscribe(self, household_id: int, tables: Optional[Iterable[str]] = None) -> Subscription:
        """Must be called from within the event loop that will consume the events."""
        subscription = Subscription(household_id, tables, maxsize=self.max_queue_size)
        self._subscriptions[household_id].add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.household_id)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscriptions[subscription.household_id]

    def subscriber_count(self, household_id: int) -> int:
        return len(self._subscriptions.get(household_id, ()))

    def publish(self, table: str, household_id: int, action: str = "update") -> int:
        """Deliver an event to matching subscribers. Returns how many received it."""
        event = ChangeEvent(table=table, household_id=household_id, action=action)
        delivered = 0
        for subscription in list(self._subscriptions.get(household_id, ())):
            if subscription.matches(event):
                subscription.push(event)
                delivered += 1
        return delivered


notifier = ChangeNotifier()
