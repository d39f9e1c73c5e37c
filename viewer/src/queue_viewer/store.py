from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .codec import AddEvent, DelEvent, InboundEvent, MessageRecord, SyncEvent

CHANGE_SYNC = "sync"
CHANGE_UPSERT = "upsert"
CHANGE_DELETE = "delete"
CHANGE_RESET = "reset"


@dataclass(frozen=True)
class StoreChange:
    """One effective mutation of the replica.

    ``message_id`` and ``record`` are set for ``upsert`` and ``delete``
    (``record`` holds the removed value for deletes) and are ``None`` for
    the bulk ``sync`` and ``reset`` kinds.
    """

    kind: str
    message_id: Optional[str] = None
    record: Any = None


Callback = Callable[[StoreChange], None]


@dataclass(eq=False)
class Subscription:
    callback: Callback

    def deliver(self, change: StoreChange) -> None:
        self.callback(change)


class ReplicaStore:
    """Local mirror of the server-side queue.

    Mutated only through :meth:`apply_sync`, :meth:`apply_upsert`,
    :meth:`apply_delete` and :meth:`reset`; every effective mutation is
    broadcast to subscribers in the order it was applied.
    """

    def __init__(self) -> None:
        self._messages: Dict[str, MessageRecord] = {}
        self._subscriptions: List[Subscription] = []

    def subscribe(self, callback: Callback) -> Subscription:
        subscription = Subscription(callback=callback)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return

    def _broadcast(self, change: StoreChange) -> None:
        for subscription in list(self._subscriptions):
            subscription.deliver(change)

    def apply_sync(self, messages: Mapping[str, MessageRecord]) -> None:
        self._messages = dict(messages)
        self._broadcast(StoreChange(CHANGE_SYNC))

    def apply_upsert(self, message_id: str, record: MessageRecord) -> None:
        self._messages[message_id] = record
        self._broadcast(StoreChange(CHANGE_UPSERT, message_id, record))

    def apply_delete(self, message_id: str) -> None:
        if message_id not in self._messages:
            return
        record = self._messages.pop(message_id)
        self._broadcast(StoreChange(CHANGE_DELETE, message_id, record))

    def apply(self, event: InboundEvent) -> None:
        if isinstance(event, SyncEvent):
            self.apply_sync(event.messages)
        elif isinstance(event, AddEvent):
            self.apply_upsert(event.message_id, event.record)
        elif isinstance(event, DelEvent):
            self.apply_delete(event.message_id)

    def reset(self) -> None:
        self._messages = {}
        self._broadcast(StoreChange(CHANGE_RESET))

    def get(self, message_id: str) -> Optional[MessageRecord]:
        return self._messages.get(message_id)

    def snapshot(self) -> Mapping[str, MessageRecord]:
        """Return a read-only copy of the current replica."""

        return MappingProxyType(dict(self._messages))

    @property
    def is_empty(self) -> bool:
        return not self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._messages

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._messages))
