"""
Realtime session manager.

Each accepted WebSocket is bound to one user id for its whole lifetime and joins
that user's private channel (`user_<id>`). A user with several open sessions has
several sockets in the same channel; all of them receive relayed messages.

The manager owns the channel table. One instance lives on `app.state.realtime`;
handlers reach it through the application rather than a module-level global.
"""
import logging
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket
from pydantic import ValidationError as SchemaValidationError
from starlette.concurrency import run_in_threadpool

from ..schemas.realtime import ClientFrame, SendMessagePayload
from ..utils.error_handlers import AppError, get_error_message
from .messaging import save_message

logger = logging.getLogger(__name__)

# Server -> client events
EVENT_NEW_MESSAGE = "new_message"
EVENT_MESSAGE_SENT = "message_sent"
EVENT_ERROR = "error"

# Client -> server events
EVENT_SEND_MESSAGE = "send_message"

MessageStore = Callable[[int, int, str], dict]


def channel_for(user_id: int) -> str:
    return f"user_{user_id}"


class ConnectionManager:
    def __init__(self, store: MessageStore = save_message):
        # Blocking persistence call; run in the threadpool so the loop stays free.
        self.store = store
        # channel name -> open sockets in it
        self.channels: dict[str, set[WebSocket]] = {}
        # socket -> bound user id; written once in connect()
        self.bindings: dict[WebSocket, int] = {}

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        """Accept an authenticated socket and join it to its user's channel."""
        await websocket.accept()
        self.bindings[websocket] = user_id
        self.channels.setdefault(channel_for(user_id), set()).add(websocket)
        logger.info("User %s connected (%d open sessions)", user_id, len(self.channels[channel_for(user_id)]))

    def disconnect(self, websocket: WebSocket) -> None:
        user_id = self.bindings.pop(websocket, None)
        if user_id is None:
            return

        channel = channel_for(user_id)
        members = self.channels.get(channel)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self.channels[channel]
        logger.info("User %s disconnected", user_id)

    def user_id_for(self, websocket: WebSocket) -> int | None:
        return self.bindings.get(websocket)

    def connections(self, channel: str) -> set[WebSocket]:
        return set(self.channels.get(channel, set()))

    def is_online(self, user_id: int) -> bool:
        return bool(self.channels.get(channel_for(user_id)))

    async def send(self, websocket: WebSocket, event: str, data: Any) -> bool:
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            logger.warning("Dropping socket of user %s after failed send: %s", self.user_id_for(websocket), e)
            self.disconnect(websocket)
            return False

    async def send_to_channel(
        self,
        channel: str,
        event: str,
        data: Any,
        *,
        exclude: WebSocket | None = None,
    ) -> int:
        """Send an event to every socket in a channel; returns how many got it."""
        delivered = 0
        for websocket in self.connections(channel):
            if websocket is exclude:
                continue
            if await self.send(websocket, event, data):
                delivered += 1
        return delivered

    async def send_message(self, websocket: WebSocket, recipient_id: int, content: str) -> dict | None:
        """
        Persist, relay, acknowledge.

        The stored record (with its id and server timestamp) is what both the
        recipient's channel and the sender's socket receive. If persistence fails
        nothing is relayed and the sender gets an `error` event instead.
        """
        sender_id = self.bindings.get(websocket)
        if sender_id is None:
            raise RuntimeError("send_message on a socket that is not connected")

        try:
            record = await run_in_threadpool(self.store, sender_id, recipient_id, content)
        except AppError as e:
            await self.send(websocket, EVENT_ERROR, {"message": e.message})
            return None
        except Exception:
            logger.exception("Unexpected error storing message from %s to %s", sender_id, recipient_id)
            await self.send(websocket, EVENT_ERROR, {"message": get_error_message("message_failed")})
            return None

        await self.send_to_channel(channel_for(recipient_id), EVENT_NEW_MESSAGE, record, exclude=websocket)
        await self.send(websocket, EVENT_MESSAGE_SENT, record)
        return record

    async def dispatch(self, websocket: WebSocket, raw: str) -> None:
        """Handle one client frame. Bad frames get an `error` event; the socket stays open."""
        try:
            frame = ClientFrame.model_validate_json(raw)
        except SchemaValidationError:
            await self.send(websocket, EVENT_ERROR, {"message": get_error_message("validation_error")})
            return

        if frame.event != EVENT_SEND_MESSAGE:
            await self.send(websocket, EVENT_ERROR, {"message": get_error_message("unknown_event")})
            return

        try:
            payload = SendMessagePayload.model_validate(frame.data)
        except SchemaValidationError:
            await self.send(websocket, EVENT_ERROR, {"message": get_error_message("invalid_message")})
            return

        await self.send_message(websocket, payload.recipient_id, payload.content)
