from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .codec import encode_action
from .connection import ConnectionManager

logger = logging.getLogger(__name__)

ACTION_WEBHOOK = "webhook"
ACTION_WEBHOOK_LEGACY = "webhookLegacy"
ACTION_REMOVE = "remove"
EVENT_DELIVERED = "delivered"


def delivered_action(message_id: str, *, legacy: bool = False) -> Dict[str, Any]:
    action = ACTION_WEBHOOK_LEGACY if legacy else ACTION_WEBHOOK
    return {"action": action, "event": EVENT_DELIVERED, "id": message_id}


def remove_action(message_id: str) -> Dict[str, Any]:
    return {"action": ACTION_REMOVE, "id": message_id}


class ActionDispatcher:
    """Fire-and-forget sender for user actions.

    Without an active transport the action is dropped; nothing is queued or
    retried and callers only learn the outcome from the return value.
    """

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    async def dispatch(self, descriptor: Mapping[str, Any]) -> bool:
        if not self._connection.is_connected:
            logger.debug("no transport, dropping action %r", descriptor)
            return False
        sent = await self._connection.send(encode_action(descriptor))
        if not sent:
            logger.debug("transport closing, dropped action %r", descriptor)
        return sent

    async def mark_delivered(self, message_id: str) -> bool:
        return await self.dispatch(delivered_action(message_id))

    async def mark_delivered_legacy(self, message_id: str) -> bool:
        return await self.dispatch(delivered_action(message_id, legacy=True))

    async def remove(self, message_id: str) -> bool:
        return await self.dispatch(remove_action(message_id))
