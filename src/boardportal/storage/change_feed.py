"""
Change Feed

Push side of the remote gateway. Table triggers publish every row change
with pg_notify() on a single channel; one dedicated asyncpg connection
LISTENs on it and fans events out to per-table subscriptions.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Tuple
from uuid import UUID, uuid4

import asyncpg

from ..models.change_event import ChangeEvent, ChangeType

logger = logging.getLogger("boardportal.storage.change_feed")

# Handlers may be plain callables or coroutine functions
ChangeHandler = Callable[[ChangeEvent], Any]

ALL_EVENTS = "*"


@dataclass
class Subscription:
    """
    A handler bound to one table.

    event: 'INSERT', 'UPDATE', 'DELETE' or '*'
    filters: column -> value equality, matched against the changed row
    owner: subscriptions with the same (owner, table) replace each other
    """
    table: str
    handler: ChangeHandler
    event: str = ALL_EVENTS
    filters: Dict[str, Any] = field(default_factory=dict)
    owner: Optional[str] = None
    id: UUID = field(default_factory=uuid4)

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ALL_EVENTS and change.type.value != self.event:
            return False
        record = change.record
        for column, value in self.filters.items():
            if str(record.get(column)) != str(value):
                return False
        return True


class ChangeFeed:
    """LISTEN/NOTIFY based change feed"""

    def __init__(self, postgres_dsn: str, channel: str = "row_changes"):
        self.pg_dsn = postgres_dsn
        self.channel = channel
        self._conn: Optional[asyncpg.Connection] = None
        self._subscriptions: Dict[UUID, Subscription] = {}
        self._owned: Dict[Tuple[str, str], UUID] = {}
        self._pending: Set[asyncio.Future] = set()

    async def connect(self):
        """Open the listener connection"""
        if self._conn is not None and not self._conn.is_closed():
            return
        self._conn = await asyncpg.connect(self.pg_dsn)
        self._conn.add_termination_listener(self._on_terminated)
        await self._conn.add_listener(self.channel, self._on_notify)
        logger.info(f"Change feed listening on '{self.channel}'")

    async def close(self):
        """Stop listening and drop all subscriptions"""
        if self._conn is not None and not self._conn.is_closed():
            await self._conn.remove_listener(self.channel, self._on_notify)
            await self._conn.close()
        self._conn = None
        self._subscriptions.clear()
        self._owned.clear()
        logger.info("Change feed closed")

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    # ============================================
    # Subscriptions
    # ============================================

    def subscribe(
        self,
        table: str,
        handler: ChangeHandler,
        event: str = ALL_EVENTS,
        filters: Optional[Dict[str, Any]] = None,
        owner: Optional[str] = None,
    ) -> Subscription:
        """
        Register a handler for changes on a table.

        A second subscription for the same (owner, table) replaces the first,
        so a reconnecting session never ends up with duplicate handlers.
        """
        event = event.upper() if event != ALL_EVENTS else event
        if event != ALL_EVENTS and event not in ChangeType.__members__:
            raise ValueError(f"Unknown change event: {event}")

        if owner is not None:
            previous = self._owned.get((owner, table))
            if previous is not None:
                self._subscriptions.pop(previous, None)
                logger.debug(f"Replaced subscription on '{table}' for {owner}")

        subscription = Subscription(
            table=table,
            handler=handler,
            event=event,
            filters=dict(filters or {}),
            owner=owner,
        )
        self._subscriptions[subscription.id] = subscription
        if owner is not None:
            self._owned[(owner, table)] = subscription.id
        logger.debug(f"Subscribed to '{table}' ({event}) filters={subscription.filters}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        removed = self._subscriptions.pop(subscription.id, None) is not None
        if subscription.owner is not None:
            key = (subscription.owner, subscription.table)
            if self._owned.get(key) == subscription.id:
                del self._owned[key]
        return removed

    def unsubscribe_owner(self, owner: str) -> int:
        """Remove every subscription held by an owner"""
        ids = [sid for (o, _), sid in self._owned.items() if o == owner]
        for sid in ids:
            subscription = self._subscriptions.get(sid)
            if subscription is not None:
                self.unsubscribe(subscription)
        return len(ids)

    def subscription_count(self, table: Optional[str] = None) -> int:
        if table is None:
            return len(self._subscriptions)
        return sum(1 for s in self._subscriptions.values() if s.table == table)

    # ============================================
    # Delivery
    # ============================================

    def dispatch(self, change: ChangeEvent) -> int:
        """Deliver an event to every matching subscription"""
        delivered = 0
        for subscription in list(self._subscriptions.values()):
            if not subscription.matches(change):
                continue
            delivered += 1
            try:
                result = subscription.handler(change)
            except Exception as e:
                logger.error(f"Change handler failed for '{change.table}' {change.type.value}: {e}")
                continue
            if inspect.isawaitable(result):
                future = asyncio.ensure_future(result)
                self._pending.add(future)
                future.add_done_callback(self._on_handler_done)
        return delivered

    def _on_handler_done(self, future: asyncio.Future):
        self._pending.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Async change handler failed: {error}")

    def _on_notify(self, connection, pid: int, channel: str, payload: str):
        try:
            change = ChangeEvent.from_payload(payload)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring malformed change payload: {e}")
            return
        self.dispatch(change)

    def _on_terminated(self, connection):
        # No reconnect: updates stop until sessions are reopened
        logger.warning("Change feed connection terminated; realtime updates stopped")
