from __future__ import annotations

import json
from typing import Any

from .store import CHANGE_DELETE, CHANGE_RESET, CHANGE_SYNC, CHANGE_UPSERT, StoreChange

SUMMARY_KEYS = ("from", "to", "html", "text", "subject")
EMPTY_QUEUE = "Queue is empty"


def _join(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def summarize(message_id: str, record: Any) -> str:
    """One-line queue row: id, recipients and subject."""

    fields = record if isinstance(record, dict) else {}
    return f"{message_id}  to: {_join(fields.get('to'))}  subject: {_join(fields.get('subject'))}"


def extra_data(record: Any) -> str:
    """Pretty JSON of everything the summary row does not already show."""

    if not isinstance(record, dict):
        return json.dumps(record, indent=1)
    rest = {key: value for key, value in record.items() if key not in SUMMARY_KEYS}
    return json.dumps(rest, indent=1, sort_keys=True)


def describe_change(change: StoreChange, queue_size: int) -> str:
    if change.kind == CHANGE_UPSERT:
        return "add " + summarize(change.message_id or "", change.record)
    if change.kind == CHANGE_DELETE:
        return f"del {change.message_id}"
    if change.kind == CHANGE_SYNC:
        if queue_size == 0:
            return EMPTY_QUEUE
        return f"sync {queue_size} message(s)"
    if change.kind == CHANGE_RESET:
        return f"reset: {EMPTY_QUEUE}"
    return change.kind


def describe_message(message_id: str, record: Any, *, include_html: bool = False) -> str:
    """Multi-line detail view of one queued message."""

    fields = record if isinstance(record, dict) else {}
    lines = [
        f"Message-Id: {message_id}",
        f"from: {_join(fields.get('from'))}",
        f"to: {_join(fields.get('to'))}",
        f"subject: {_join(fields.get('subject'))}",
    ]
    if fields.get("text"):
        lines.append(f"text: {_join(fields.get('text'))}")
    if fields.get("html"):
        if include_html:
            lines.append(f"html: {_join(fields.get('html'))}")
        else:
            lines.append("html: present (use --html to print it)")
    lines.append("data:")
    lines.append(extra_data(record))
    return "\n".join(lines)
