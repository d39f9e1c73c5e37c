"""Live mail-queue viewer: stream client, replica store and action dispatch."""

from .codec import AddEvent, DelEvent, SyncEvent, UnknownEvent, decode_frame, encode_action
from .config import ViewerConfig, endpoint_from_origin
from .connection import ConnectionManager
from .dispatcher import ActionDispatcher
from .session import ViewerSession
from .store import ReplicaStore, StoreChange, Subscription

__all__ = [
    "AddEvent",
    "DelEvent",
    "SyncEvent",
    "UnknownEvent",
    "decode_frame",
    "encode_action",
    "ViewerConfig",
    "endpoint_from_origin",
    "ConnectionManager",
    "ActionDispatcher",
    "ViewerSession",
    "ReplicaStore",
    "StoreChange",
    "Subscription",
]
