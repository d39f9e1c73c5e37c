"""Wire codec for the queue stream.

Inbound frames are JSON objects carrying an ``action`` discriminator:

* ``{"action": "sync", "data": {id: record, ...}}`` replaces the whole queue,
* ``{"action": "add", "id": id, "data": record}`` upserts one message,
* ``{"action": "del", "id": id}`` removes one message.

Anything else decodes to :class:`UnknownEvent` so newer servers can add
actions without breaking older viewers. Outbound actions are plain dicts
serialized verbatim.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

MessageRecord = Dict[str, Any]


@dataclass(frozen=True)
class SyncEvent:
    messages: Dict[str, MessageRecord] = field(default_factory=dict)


@dataclass(frozen=True)
class AddEvent:
    message_id: str
    record: MessageRecord


@dataclass(frozen=True)
class DelEvent:
    message_id: str


@dataclass(frozen=True)
class UnknownEvent:
    frame: Dict[str, Any]


InboundEvent = Union[SyncEvent, AddEvent, DelEvent, UnknownEvent]


def _decode_sync(frame: Dict[str, Any]) -> InboundEvent:
    data = frame.get("data")
    if data is None:
        return SyncEvent({})
    if not isinstance(data, dict):
        return UnknownEvent(frame)
    return SyncEvent(dict(data))


def _decode_add(frame: Dict[str, Any]) -> InboundEvent:
    message_id = frame.get("id")
    record = frame.get("data")
    if not isinstance(message_id, str) or record is None:
        return UnknownEvent(frame)
    return AddEvent(message_id, record)


def _decode_del(frame: Dict[str, Any]) -> InboundEvent:
    message_id = frame.get("id")
    if not isinstance(message_id, str):
        return UnknownEvent(frame)
    return DelEvent(message_id)


_DECODERS = {
    "sync": _decode_sync,
    "add": _decode_add,
    "del": _decode_del,
}


def decode_frame(text: Union[str, bytes]) -> Optional[InboundEvent]:
    """Decode one inbound frame; ``None`` means the frame was malformed."""

    try:
        frame = json.loads(text)
    except (ValueError, RecursionError) as exc:
        logger.debug("dropping malformed frame: %s", exc)
        return None
    if not isinstance(frame, dict):
        logger.debug("dropping non-object frame: %r", frame)
        return None

    action = frame.get("action")
    decoder = _DECODERS.get(action) if isinstance(action, str) else None
    event = decoder(frame) if decoder is not None else UnknownEvent(frame)
    if isinstance(event, UnknownEvent):
        logger.debug("unknown action %r", frame)
    return event


def encode_action(descriptor: Mapping[str, Any]) -> str:
    return json.dumps(dict(descriptor))
