"""Bidirectional event channel to the scheduling server."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .logger import get_logger

log = get_logger("channel")

EventHandler = Callable[..., Any]
AckCallback = Callable[..., Any]

# Inbound
EVENT_CONNECT = "connect"
EVENT_DISCONNECT = "disconnect"
EVENT_BROADCAST_UPDATE = "broadcast_update"
EVENT_PROCESS_STATS = "process_stats"

# Outbound
REQUEST_CREATE_SCHEDULE = "create_schedule"
REQUEST_STOP_SCHEDULE = "stop_schedule"
REQUEST_DELETE_SCHEDULE = "delete_schedule"
REQUEST_EMERGENCY_STOP_ALL = "emergency_stop_all"
REQUEST_GET_PROCESS_STATS = "get_process_stats"


class ChannelAdapter(Protocol):
    """Contract the session consumes; transport and reconnection live behind it."""

    @property
    def connected(self) -> bool: ...

    def on(self, event: str, handler: EventHandler) -> None: ...

    def emit(self, event: str, data: Any = None, *, callback: AckCallback | None = None) -> None: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...


class SocketIOChannel:
    """`ChannelAdapter` backed by a python-socketio client."""

    def __init__(
        self,
        url: str,
        *,
        socketio_path: str = "socket.io",
        transports: list[str] | None = None,
        reconnection: bool = True,
        wait_timeout_sec: float = 5.0,
        client: Any | None = None,
    ) -> None:
        if not url.strip():
            raise ValueError("url must be non-empty")
        if client is None:
            import socketio

            client = socketio.Client(reconnection=reconnection, logger=False, engineio_logger=False)
        self._client = client
        self._url = url
        self._socketio_path = socketio_path
        self._transports = transports
        self._wait_timeout_sec = wait_timeout_sec

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    def on(self, event: str, handler: EventHandler) -> None:
        self._client.on(event, handler)

    def emit(self, event: str, data: Any = None, *, callback: AckCallback | None = None) -> None:
        log.debug(f"emit {event}")
        self._client.emit(event, data, callback=callback)

    def connect(self) -> None:
        log.info(f"Connecting to {self._url}")
        self._client.connect(
            self._url,
            transports=self._transports,
            socketio_path=self._socketio_path,
            wait_timeout=self._wait_timeout_sec,
        )

    def disconnect(self) -> None:
        self._client.disconnect()
