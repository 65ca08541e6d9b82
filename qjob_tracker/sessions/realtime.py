# qjob_tracker/sessions/realtime.py
import json
import logging
from typing import Annotated, Any, Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from .registry import AbstractSessionRegistry

logger = logging.getLogger(__name__)

realtime_router = APIRouter(tags=["Realtime"])


def get_session_registry(websocket: WebSocket) -> AbstractSessionRegistry:
    """Returns the registry created by the application lifespan."""
    return websocket.app.state.session_registry


def _parse_event(raw_message: str) -> Optional[Dict[str, Any]]:
    """Decode a `{"event": ..., "data": {...}}` frame; None if it is not one."""
    try:
        message = json.loads(raw_message)
    except json.JSONDecodeError:
        return None
    if not isinstance(message, dict) or not isinstance(message.get("event"), str):
        return None
    data = message.get("data")
    message["data"] = data if isinstance(data, dict) else {}
    return message


@realtime_router.websocket("/ws")
async def realtime_endpoint(
    websocket: WebSocket,
    registry: Annotated[AbstractSessionRegistry, Depends(get_session_registry)],
):
    """
    Realtime channel for the dashboard.

    Inbound events:
        auth        {"userId": "..."} binds this connection to the user.
        disconnect  drops the binding and closes the socket.
    """
    await websocket.accept()
    connection_id = uuid4().hex
    await registry.connect(connection_id)
    logger.info(f"Realtime connection opened: {connection_id}")

    try:
        await websocket.send_json({"event": "connected", "data": {"connectionId": connection_id}})

        while True:
            raw_message = await websocket.receive_text()
            message = _parse_event(raw_message)
            if message is None:
                logger.debug(f"Ignoring malformed frame on connection {connection_id}.")
                continue

            event_name = message["event"]
            if event_name == "auth":
                user_id = message["data"].get("userId")
                if not isinstance(user_id, str) or not user_id:
                    logger.warning(f"auth event without a usable userId on connection {connection_id}.")
                    continue
                await registry.authenticate(connection_id, user_id)
                logger.info(f"Authenticated connection {connection_id} for user {user_id}")
            elif event_name == "disconnect":
                await websocket.close()
                break
            else:
                logger.debug(f"Ignoring unknown event '{event_name}' on connection {connection_id}.")
    except WebSocketDisconnect:
        pass
    finally:
        await registry.disconnect(connection_id)
        logger.info(f"Realtime connection closed: {connection_id}")
