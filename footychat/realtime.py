"""Helpers for pushing events to websocket rooms from synchronous code."""

from __future__ import annotations

from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer


SQUAD_GROUP_PREFIX = "squad_"


def squad_group_name(squad_id) -> str:
    return f"{SQUAD_GROUP_PREFIX}{squad_id}"


def broadcast_to_squad(squad_id, event_type: str, payload: Dict[str, Any]) -> None:
    """Send ``payload`` to every socket that joined the squad room."""

    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        squad_group_name(squad_id),
        {"type": "broadcast", "event": {"type": event_type, **payload}},
    )
