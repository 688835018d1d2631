"""EventSub websocket session: frame decoding, state transitions and the connection loop.

``transition`` is a pure function of (session, frame) returning the next session
and the actions to perform. ``EventSubClient`` owns the connection and applies
those actions: pongs are sent inline, subscription and chat handling run as
background tasks so the read loop never waits on them.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

import websockets
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from websockets.exceptions import WebSocketException

from command_router.models import CHAT_MESSAGE_EVENT_TYPE, IncomingChatEvent

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine

EVENTSUB_WEBSOCKET_URL = "wss://eventsub.wss.twitch.tv/ws"
RECONNECT_DELAY_SECONDS = 5.0
KEEPALIVE_GRACE_SECONDS = 5.0
PONG_FRAME = json.dumps({"type": "pong"})

logger = logging.getLogger("twitch_listener.session")


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class FrameMetadata(BaseModel):
    """Envelope metadata of a feed frame."""

    message_type: str
    message_id: str | None = None
    subscription_type: str | None = None


class Frame(BaseModel):
    """Decoded feed frame."""

    metadata: FrameMetadata
    payload: dict[str, Any] = Field(default_factory=dict)


class SessionInfo(BaseModel):
    """``payload.session`` of welcome and reconnect frames."""

    id: str
    keepalive_timeout_seconds: int | None = None
    reconnect_url: str | None = None


class _ChatText(BaseModel):
    text: str


class _ChatMessageEvent(BaseModel):
    chatter_user_login: str
    message: _ChatText


def decode_frame(raw: str | bytes) -> Frame | None:
    """Decode one text frame; malformed frames are logged and dropped."""
    try:
        return Frame.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        logger.warning("Ignoring malformed frame: %s", exc)
        return None


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class ConnectionState(str, Enum):
    """Lifecycle of the feed connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


class Session(BaseModel):
    """Connection state and the id of the last welcomed session."""

    model_config = ConfigDict(frozen=True)

    state: ConnectionState = ConnectionState.DISCONNECTED
    session_id: str | None = None
    url: str = EVENTSUB_WEBSOCKET_URL
    keepalive_timeout_seconds: int | None = None


class SendPong(BaseModel):
    """Answer a protocol ping on the same connection."""

    model_config = ConfigDict(frozen=True)


class Subscribe(BaseModel):
    """Register the chat subscription for a freshly welcomed session."""

    model_config = ConfigDict(frozen=True)

    session_id: str


class Reconnect(BaseModel):
    """Close the current connection and open ``url``."""

    model_config = ConfigDict(frozen=True)

    url: str


class DispatchChat(BaseModel):
    """Hand a chat message to the command router."""

    model_config = ConfigDict(frozen=True)

    event: IncomingChatEvent


Action = SendPong | Subscribe | Reconnect | DispatchChat


def _session_info(frame: Frame) -> SessionInfo | None:
    try:
        return SessionInfo.model_validate(frame.payload.get("session"))
    except ValidationError:
        logger.warning("Ignoring %s frame without a valid session", frame.metadata.message_type)
        return None


def _chat_event(frame: Frame) -> IncomingChatEvent | None:
    try:
        event = _ChatMessageEvent.model_validate(frame.payload.get("event"))
    except ValidationError:
        logger.warning("Ignoring chat notification without sender or text")
        return None
    return IncomingChatEvent(
        sender_login=event.chatter_user_login,
        message_text=event.message.text,
        event_type=CHAT_MESSAGE_EVENT_TYPE,
    )


def transition(session: Session, frame: Frame) -> tuple[Session, list[Action]]:  # noqa: PLR0911
    """Return the next session and the side effects for one decoded frame."""
    message_type = frame.metadata.message_type

    if message_type == "session_welcome":
        info = _session_info(frame)
        if info is None:
            return session, []
        welcomed = session.model_copy(
            update={
                "state": ConnectionState.OPEN,
                "session_id": info.id,
                "keepalive_timeout_seconds": info.keepalive_timeout_seconds,
            }
        )
        return welcomed, [Subscribe(session_id=info.id)]

    if message_type == "session_reconnect":
        info = _session_info(frame)
        if info is None or not info.reconnect_url:
            return session, []
        moving = session.model_copy(update={"state": ConnectionState.CONNECTING, "url": info.reconnect_url})
        return moving, [Reconnect(url=info.reconnect_url)]

    if message_type == "keepalive":
        logger.debug("Keepalive received, connection is healthy.")
        return session, []

    if message_type == "ping":
        return session, [SendPong()]

    if message_type == "notification":
        if frame.metadata.subscription_type != CHAT_MESSAGE_EVENT_TYPE:
            logger.debug("Skipping %s notification", frame.metadata.subscription_type)
            return session, []
        event = _chat_event(frame)
        if event is None:
            return session, []
        return session, [DispatchChat(event=event)]

    logger.debug("Skipping unhandled message type %s", message_type)
    return session, []


# ---------------------------------------------------------------------------
# Connection loop
# ---------------------------------------------------------------------------


class EventSubClient:
    """Keep a session open on the feed, reconnecting forever."""

    def __init__(  # noqa: PLR0913
        self,
        on_welcome: Callable[[str], Awaitable[object]],
        on_chat_message: Callable[[IncomingChatEvent], Awaitable[object]],
        *,
        url: str = EVENTSUB_WEBSOCKET_URL,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        connect: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self._on_welcome = on_welcome
        self._on_chat_message = on_chat_message
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._connect = connect
        self._session = Session(url=url)
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def session(self) -> Session:
        """Return the current session state."""
        return self._session

    async def run_forever(self) -> None:
        """Connect, serve, and reconnect until cancelled."""
        url = self._url
        while True:
            reconnect_url = await self.run_once(url)
            if reconnect_url is not None:
                url = reconnect_url
                continue
            logger.info("Attempting to reconnect in %.0f seconds...", self._reconnect_delay)
            await asyncio.sleep(self._reconnect_delay)
            url = self._url

    async def run_once(self, url: str) -> str | None:
        """Serve one connection; return the reconnect URL when the server asked to move."""
        self._session = self._session.model_copy(update={"state": ConnectionState.CONNECTING, "url": url})
        logger.info("Connecting to %s", url)
        try:
            async with self._connect(url) as websocket:
                logger.info("WebSocket connection established.")
                return await self._serve(websocket)
        except (WebSocketException, OSError) as exc:
            logger.warning("WebSocket error: %s", exc)
            return None
        finally:
            self._session = self._session.model_copy(update={"state": ConnectionState.DISCONNECTED})
            logger.info("WebSocket connection closed.")

    async def handle_raw(self, raw: str | bytes, websocket: Any) -> str | None:  # noqa: ANN401
        """Apply one raw frame; return the reconnect URL if the frame requested one."""
        frame = decode_frame(raw)
        if frame is None:
            return None
        self._session, actions = transition(self._session, frame)
        for action in actions:
            if isinstance(action, SendPong):
                await websocket.send(PONG_FRAME)
                logger.info("Ping received, pong sent.")
            elif isinstance(action, Subscribe):
                logger.info("Session %s welcomed, subscribing to chat events.", action.session_id)
                self._spawn(self._on_welcome(action.session_id))
            elif isinstance(action, DispatchChat):
                self._spawn(self._on_chat_message(action.event))
            elif isinstance(action, Reconnect):
                logger.info("Session reconnect requested. Reconnecting to %s", action.url)
                return action.url
        return None

    async def wait_for_pending(self) -> None:
        """Wait for the subscription and chat tasks started so far.

        Test and shutdown helper: the read loop itself never waits on these tasks,
        so callers that need every in-flight reply delivered (tests, a graceful
        stop) await this after the feed loop has returned.
        """
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _serve(self, websocket: Any) -> str | None:  # noqa: ANN401
        while True:
            timeout = self._receive_timeout()
            try:
                raw = await asyncio.wait_for(websocket.recv(), timeout)
            except asyncio.TimeoutError:
                logger.warning("No frame within %.0f seconds, dropping the connection", timeout)
                return None
            reconnect_url = await self.handle_raw(raw, websocket)
            if reconnect_url is not None:
                return reconnect_url

    def _receive_timeout(self) -> float | None:
        keepalive = self._session.keepalive_timeout_seconds
        if self._session.state is not ConnectionState.OPEN or not keepalive:
            return None
        return keepalive + KEEPALIVE_GRACE_SECONDS

    def _spawn(self, coro: Coroutine[Any, Any, object]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[object]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task failed", exc_info=exc)
