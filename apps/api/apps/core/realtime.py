"""
Change notifications for list views.

Saves and deletes of tracked models are published as ChangeEvents once the
surrounding transaction commits. Consumers subscribe to a table, optionally
narrowed by column equality filters, and respond by reloading the list they
show instead of merging the change in (see LiveQuery). Redundant reloads are
harmless because every reload fully replaces the previous data.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from django.db import transaction
from django.db.models.signals import post_delete, post_save

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'
ALL_EVENTS = frozenset({INSERT, UPDATE, DELETE})


@dataclass(frozen=True)
class ChangeEvent:
    """One committed row change, with the row as column -> value."""
    table: str
    event: str
    record: Dict[str, Any]


@dataclass(eq=False)
class Subscription:
    id: int
    table: str
    callback: Callable[[ChangeEvent], None]
    filters: Dict[str, Any] = field(default_factory=dict)
    events: FrozenSet[str] = ALL_EVENTS
    active: bool = True

    def matches(self, change: ChangeEvent) -> bool:
        if not self.active or change.table != self.table:
            return False
        if change.event not in self.events:
            return False
        # UUIDs arrive as UUID objects from the ORM and as strings from callers
        return all(
            str(change.record.get(column)) == str(value)
            for column, value in self.filters.items()
        )


class SubscriptionManager:
    """
    Maps (table, filter) pairs to callbacks.

    A callback that raises is logged and does not stop delivery to the
    other subscribers of the same change.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        table: str,
        callback: Callable[[ChangeEvent], None],
        filters: Optional[Dict[str, Any]] = None,
        events=None,
    ) -> Subscription:
        events = frozenset(events) if events else ALL_EVENTS
        unknown = events - ALL_EVENTS
        if unknown:
            raise ValueError(f"Unknown change events: {', '.join(sorted(unknown))}")

        with self._lock:
            subscription = Subscription(
                id=next(self._ids),
                table=table,
                callback=callback,
                filters=dict(filters or {}),
                events=events,
            )
            self._subscriptions[subscription.id] = subscription

        logger.debug(
            'Subscribed to table changes',
            extra={'event': 'realtime_subscribed', 'table': table, 'subscription_id': subscription.id}
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivery. Unsubscribing twice is a no-op."""
        with self._lock:
            subscription.active = False
            self._subscriptions.pop(subscription.id, None)

    def subscriptions_for(self, table: str) -> List[Subscription]:
        with self._lock:
            return [s for s in self._subscriptions.values() if s.table == table]

    def publish(self, change: ChangeEvent) -> int:
        """Deliver a change to every matching subscriber; returns the delivery count."""
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]

        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(change)
                delivered += 1
            except Exception:
                logger.exception(
                    'Change subscriber failed',
                    extra={
                        'event': 'realtime_callback_failed',
                        'table': change.table,
                        'change_event': change.event,
                        'subscription_id': subscription.id,
                    }
                )
        return delivered


manager = SubscriptionManager()


def serialize_instance(instance) -> Dict[str, Any]:
    """Row representation of a model instance keyed by column name."""
    return {
        f.column: getattr(instance, f.attname)
        for f in instance._meta.concrete_fields
    }


def publish_on_commit(change: ChangeEvent) -> None:
    """Publish `change` once the current transaction commits (immediately outside one)."""
    transaction.on_commit(lambda: manager.publish(change))


def _on_saved(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    publish_on_commit(ChangeEvent(
        table=sender._meta.db_table,
        event=INSERT if created else UPDATE,
        record=serialize_instance(instance),
    ))


def _on_deleted(sender, instance, **kwargs):
    publish_on_commit(ChangeEvent(
        table=sender._meta.db_table,
        event=DELETE,
        record=serialize_instance(instance),
    ))


def track_model(model) -> None:
    """Publish committed saves and deletes of `model` to the manager."""
    uid = f'realtime:{model._meta.label}'
    post_save.connect(_on_saved, sender=model, dispatch_uid=f'{uid}:save')
    post_delete.connect(_on_deleted, sender=model, dispatch_uid=f'{uid}:delete')


class LiveQuery:
    """
    A list kept current by full reloads on change notifications.

    Usage:
        with LiveQuery('messages', load_inbox, filters={'conversation_id': cid}) as inbox:
            render(inbox.data)   # reloaded after every matching commit

    The subscription lives exactly as long as the `with` block (or between
    open() and close()).
    """

    def __init__(self, table, loader, filters=None, events=None, subscriptions=None):
        self.table = table
        self.filters = dict(filters or {})
        self.events = events
        self.data = None
        self.reload_count = 0
        self._loader = loader
        self._manager = subscriptions or manager
        self._subscription = None

    @property
    def is_open(self):
        return self._subscription is not None

    def open(self):
        if self.is_open:
            return self
        self.reload()
        self._subscription = self._manager.subscribe(
            self.table, self._on_change, filters=self.filters, events=self.events
        )
        return self

    def close(self):
        if self._subscription is not None:
            self._manager.unsubscribe(self._subscription)
            self._subscription = None

    def reload(self):
        self.data = self._loader()
        self.reload_count += 1
        return self.data

    def _on_change(self, change):
        self.reload()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
