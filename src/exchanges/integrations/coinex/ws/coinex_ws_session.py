"""
CoinEx Futures WebSocket Session

Owns one logical connection to wss://socket.coinex.com/v2/futures:

- connection lifecycle with capped exponential reconnect backoff
- server.sign authentication handshake
- fixed-id subscribe/unsubscribe requests with replay after reconnect
- inbound frame decoding (text, gzip, zlib, raw deflate) and dispatch
- event emitter consumed by strategy and auto-trade code

Everything runs on the caller's asyncio event loop. Frames are processed
one at a time in delivery order by the connection task. Reconnect and
connect-timeout timers live in a TimerRegistry keyed by TimerPurpose so
disconnect() can cancel both.

Events (EventName): open, close, error, authenticated,
authentication_failed, message, stateUpdate, positionUpdate,
positionSnapshot, reconnecting.

Usage:
    session = CoinexWebSocketSession(credential_provider=EnvCredentialProvider())
    session.on(EventName.POSITION_UPDATE, handle_position)
    await session.connect_and_subscribe("XRPUSDT")
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import msgspec
import websockets
from websockets.exceptions import ConnectionClosed

from config.structs import WebSocketConfig
from exchanges.integrations.coinex.credentials import ApiCredentialStore, CredentialProvider, is_usable
from exchanges.integrations.coinex.ws.auth import AUTH_REQUEST_ID, build_auth_message
from exchanges.integrations.coinex.ws.subscriptions import (
    ALL_MARKETS, Subscription, SubscriptionRegistry, Topic,
    build_subscription_message, lookup_request_id, requires_auth
)
from infrastructure.exceptions.exchange import (
    ConnectionTimeoutError, ExchangeConnectionError, FrameDecodeError,
    ReconnectExhaustedError, SubscriptionError
)
from infrastructure.logging import HFTLoggerInterface, LoggingTimer, get_exchange_logger
from infrastructure.networking.websocket import (
    AuthState, CloseCode, ConnectionState, EventEmitter, EventName,
    FrameDecoder, SubscriptionAction, TimerPurpose
)
from utils.task_utils import TaskManager, TimerRegistry, cancel_tasks_with_timeout, safe_close_connection

POSITION_UPDATE_METHOD = "position.update"
POSITION_SNAPSHOT_METHOD = "position.snapshot"
STATE_UPDATE_METHOD = "state.update"

ConnectMethod = Callable[[str], Awaitable[Any]]
Handler = Callable[..., Any]


class CoinexWebSocketSession:

    def __init__(
        self,
        config: Optional[WebSocketConfig] = None,
        url: Optional[str] = None,
        credential_provider: Optional[CredentialProvider] = None,
        connect_method: Optional[ConnectMethod] = None,
        connection_handler: Optional[Callable[[ConnectionState], Any]] = None,
        logger: Optional[HFTLoggerInterface] = None,
    ):
        config = config or WebSocketConfig()
        if url:
            config = msgspec.structs.replace(config, url=url)
        config.validate()

        self.config = config
        self.logger = logger or get_exchange_logger('coinex', 'ws.session')
        self.connection_handler = connection_handler

        self._credential_provider = credential_provider or ApiCredentialStore()
        self._connect_method = connect_method or self._default_connect

        self._events: EventEmitter[EventName] = EventEmitter('coinex.ws', self.logger)
        self._method_handlers: EventEmitter[str] = EventEmitter('coinex.ws.methods', self.logger)
        self._decoder = FrameDecoder(self.logger, max_decompressed_size=self.config.max_decompressed_size)
        self._subscriptions = SubscriptionRegistry()
        self._timers = TimerRegistry()
        self._task_manager = TaskManager('coinex_ws')

        self._websocket = None
        self._connection_task: Optional[asyncio.Task] = None
        self._replay_task: Optional[asyncio.Task] = None

        self._connection_state = ConnectionState.DISCONNECTED
        self._auth_state = AuthState.UNAUTHENTICATED
        self.reconnect_attempts = 0
        self._should_reconnect = True

        self._auth_waiters: List[asyncio.Future] = []
        self._connection_waiters: List[asyncio.Future] = []

    # Status accessors

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection_state

    @property
    def auth_state(self) -> AuthState:
        return self._auth_state

    @property
    def connected(self) -> bool:
        return self._connection_state == ConnectionState.CONNECTED

    @property
    def authenticated(self) -> bool:
        return self._auth_state == AuthState.AUTHENTICATED

    @property
    def active_subscriptions(self) -> List[Subscription]:
        return self._subscriptions.snapshot()

    @property
    def pending_timers(self) -> List[TimerPurpose]:
        return self._timers.pending

    # Event registration

    def on(self, event: Union[EventName, str], handler: Handler) -> Handler:
        """Register handler; unknown event names raise ValueError."""
        return self._events.on(EventName(event), handler)

    def once(self, event: Union[EventName, str], handler: Handler) -> Handler:
        return self._events.once(EventName(event), handler)

    def off(self, event: Union[EventName, str], handler: Handler) -> bool:
        """Remove the first registration of this exact handler object."""
        return self._events.off(EventName(event), handler)

    def on_method(self, method: str, handler: Handler) -> Handler:
        """Register handler for pushes with this exact method, e.g. 'deals.update'."""
        return self._method_handlers.on(method, handler)

    def off_method(self, method: str, handler: Handler) -> bool:
        return self._method_handlers.off(method, handler)

    # Credentials

    def set_credentials(self, api_key: str, secret_key: str) -> None:
        if isinstance(self._credential_provider, ApiCredentialStore):
            self._credential_provider.set_credentials(api_key, secret_key)
        else:
            self._credential_provider = ApiCredentialStore(api_key, secret_key)

    def has_credentials(self) -> bool:
        return is_usable(self._credential_provider.get_credentials())

    # Connection lifecycle

    async def connect(self) -> None:
        """
        Start opening the socket; returns once the attempt is scheduled.

        No-op while CONNECTING or CONNECTED. From DISCONNECTED the reconnect
        attempt counter starts over. Use wait_for_connection() to block until
        the socket is open.
        """
        if self._connection_state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            self.logger.debug("Connect ignored", state=self._connection_state.name)
            return

        if self._connection_state == ConnectionState.DISCONNECTED:
            self.reconnect_attempts = 0
        self._should_reconnect = True
        self._timers.cancel(TimerPurpose.RECONNECT)
        self._open_connection()

    async def disconnect(self) -> None:
        """
        Close with normal closure and stop reconnecting.

        Cancels reconnect and connect-timeout timers and forgets active
        subscriptions. Calling it while already disconnected does nothing.
        """
        if await self._shutdown("Client disconnect", clear_subscriptions=True):
            self.logger.info("WebSocket disconnected by client", url=self.url)
            await self._events.emit(EventName.CLOSE, {"code": int(CloseCode.NORMAL), "reason": "Client disconnect"})

    async def close(self) -> None:
        await self.disconnect()

    async def force_reconnect(self) -> None:
        """Drop the current socket, reset the attempt counter and connect again, keeping subscriptions."""
        self.logger.info("Forcing reconnect", url=self.url, subscriptions=len(self._subscriptions))
        if await self._shutdown("Forced reconnect", clear_subscriptions=False):
            await self._events.emit(EventName.CLOSE, {"code": int(CloseCode.NORMAL), "reason": "Forced reconnect"})
        await self.connect()

    async def wait_for_connection(self, timeout: float = 10.0) -> bool:
        if self.connected:
            return True
        return await self._wait(self._connection_waiters, timeout, "connection")

    async def connect_and_subscribe(self, symbol: str, timeout: Optional[float] = None) -> bool:
        """Connect, authenticate and subscribe to position updates for symbol."""
        await self.connect()
        if not await self.wait_for_connection(self.config.connect_timeout):
            self.logger.error("Connection not established", url=self.url)
            return False

        if not self.authenticated:
            if not await self.authenticate():
                return False
            if not await self.wait_for_authentication(timeout):
                return False

        return await self.subscribe_to_positions(symbol, timeout=timeout)

    def _open_connection(self) -> None:
        self._update_state(ConnectionState.CONNECTING)
        self._connection_task = self._task_manager.create_task(self._run_connection(), "connection")

    async def _default_connect(self, url: str):
        return await websockets.connect(
            url,
            ping_interval=self.config.ping_interval,
            ping_timeout=self.config.ping_timeout,
            close_timeout=self.config.close_timeout,
            max_size=self.config.max_message_size,
        )

    async def _run_connection(self) -> None:
        websocket = await self._open_socket()

        if websocket is None:
            if self._connection_state == ConnectionState.CONNECTING:
                await self._handle_closure(int(CloseCode.ABNORMAL), "Connection failed", was_open=False)
            return

        self._websocket = websocket
        self.reconnect_attempts = 0
        self._update_state(ConnectionState.CONNECTED)
        self._resolve_waiters(self._connection_waiters, True)
        self.logger.info("WebSocket connected", url=self.url)
        self.logger.counter("ws_connections", exchange="coinex")
        await self._events.emit(EventName.OPEN)

        if self.config.replay_subscriptions and len(self._subscriptions) and self.connected:
            self._replay_task = self._task_manager.create_task(self._replay_subscriptions(), "replay")

        close_code, reason = await self._read_frames(websocket)

        if self._websocket is not websocket:
            # disconnect() or force_reconnect() already took over
            return
        self._websocket = None
        await self._handle_closure(close_code, reason, was_open=True)

    async def _open_socket(self):
        """Open the socket racing the connect-timeout timer. Returns None on failure."""
        attempt = asyncio.ensure_future(self._connect_method(self.url))
        self._timers.schedule(TimerPurpose.CONNECT_TIMEOUT, self.config.connect_timeout, attempt.cancel)
        try:
            with LoggingTimer(self.logger, "ws_connect", exchange="coinex"):
                await asyncio.wait({attempt})
        except asyncio.CancelledError:
            if attempt.done() and not attempt.cancelled() and attempt.exception() is None:
                await safe_close_connection(attempt.result(), reason="Connect cancelled",
                                            timeout=self.config.close_timeout, logger=self.logger)
            raise
        finally:
            self._timers.cancel(TimerPurpose.CONNECT_TIMEOUT)
            if not attempt.done():
                attempt.cancel()

        if attempt.cancelled():
            error = ConnectionTimeoutError(
                408, f"Connection not established within {self.config.connect_timeout}s")
            self.logger.warning("WebSocket connection timed out",
                                url=self.url, timeout_seconds=self.config.connect_timeout)
            await self._events.emit(EventName.ERROR, error)
            return None

        exc = attempt.exception()
        if exc is not None:
            error = ExchangeConnectionError(503, f"Connection failed: {exc}")
            error.__cause__ = exc
            self.logger.error("WebSocket connection failed",
                              url=self.url, error_type=type(exc).__name__, error_message=str(exc))
            await self._events.emit(EventName.ERROR, error)
            return None

        return attempt.result()

    async def _read_frames(self, websocket) -> Tuple[int, str]:
        try:
            async for frame in websocket:
                await self._handle_frame(frame)
        except ConnectionClosed as e:
            self.logger.warning("WebSocket closed with error", error_message=str(e))
        except OSError as e:
            self.logger.error("WebSocket transport error",
                              error_type=type(e).__name__, error_message=str(e))
            await self._events.emit(EventName.ERROR, ExchangeConnectionError(503, f"Transport error: {e}"))

        close_code = getattr(websocket, 'close_code', None) or int(CloseCode.ABNORMAL)
        reason = getattr(websocket, 'close_reason', None) or ""
        return int(close_code), reason

    async def _handle_closure(self, code: int, reason: str, was_open: bool) -> None:
        """Apply the reconnect policy after the socket closed or failed to open."""
        if was_open:
            self.logger.warning("WebSocket closed", close_code=code, reason=reason)
            self._update_state(ConnectionState.DISCONNECTED)
            await self._events.emit(EventName.CLOSE, {"code": code, "reason": reason})

        if not self._should_reconnect:
            self._update_state(ConnectionState.DISCONNECTED)
            return

        if code == CloseCode.NORMAL:
            self.logger.info("WebSocket closed normally, not reconnecting")
            self._update_state(ConnectionState.DISCONNECTED)
            return

        if self.reconnect_attempts >= self.config.max_reconnect_attempts:
            self._should_reconnect = False
            self._update_state(ConnectionState.DISCONNECTED)
            self.logger.error("Max reconnection attempts reached",
                              max_attempts=self.config.max_reconnect_attempts, close_code=code)
            await self._events.emit(EventName.ERROR, ReconnectExhaustedError(self.reconnect_attempts, code))
            return

        self.reconnect_attempts += 1
        delay = self.config.reconnect_delay_for(self.reconnect_attempts)
        self._update_state(ConnectionState.RECONNECTING)
        self._timers.schedule(TimerPurpose.RECONNECT, delay, self._on_reconnect_timer)

        self.logger.warning("Connection lost, reconnecting",
                            attempt=self.reconnect_attempts,
                            max_attempts=self.config.max_reconnect_attempts,
                            delay_seconds=delay,
                            close_code=code)
        self.logger.counter("ws_reconnection_attempts", exchange="coinex")
        await self._events.emit(EventName.RECONNECTING, {"attempt": self.reconnect_attempts, "delay": delay})

    def _on_reconnect_timer(self) -> None:
        if not self._should_reconnect or self._connection_state != ConnectionState.RECONNECTING:
            return
        self._open_connection()

    async def _shutdown(self, reason: str, clear_subscriptions: bool) -> bool:
        """Stop tasks, timers and the socket. Returns False when already disconnected."""
        self._should_reconnect = False
        self._timers.cancel_all()

        previous_state = self._connection_state
        websocket, self._websocket = self._websocket, None

        current = asyncio.current_task()
        tasks = [t for t in (self._connection_task, self._replay_task) if t is not None and t is not current]
        self._connection_task = None
        self._replay_task = None
        await cancel_tasks_with_timeout(tasks, timeout=self.config.close_timeout, logger=self.logger)

        if websocket is not None:
            await safe_close_connection(websocket, code=int(CloseCode.NORMAL), reason=reason,
                                        timeout=self.config.close_timeout, logger=self.logger)

        if clear_subscriptions:
            self._subscriptions.clear()
        self.reconnect_attempts = 0

        if previous_state == ConnectionState.DISCONNECTED:
            return False

        self._update_state(ConnectionState.DISCONNECTED)
        self._resolve_waiters(self._connection_waiters, False)
        return True

    def _update_state(self, state: ConnectionState) -> None:
        """Update connection state, reset auth when leaving CONNECTED, notify handler."""
        previous_state = self._connection_state
        if previous_state == state:
            return
        self._connection_state = state

        if previous_state == ConnectionState.CONNECTED:
            self._reset_auth()

        self.logger.info("Connection state changed",
                         previous_state=previous_state.name,
                         new_state=state.name)

        if self.connection_handler:
            try:
                result = self.connection_handler(state)
                if inspect.isawaitable(result):
                    asyncio.ensure_future(result)
            except Exception as e:
                self.logger.error("Error in state change handler",
                                  error_type=type(e).__name__,
                                  error_message=str(e))

    def _reset_auth(self) -> None:
        self._auth_state = AuthState.UNAUTHENTICATED
        self._resolve_waiters(self._auth_waiters, False)

    # Sending

    async def send(self, message: Union[Dict[str, Any], str, bytes]) -> bool:
        """
        Send a request over the socket.

        Dicts are JSON-encoded. Returns False without raising when not
        connected or when the write fails.
        """
        websocket = self._websocket
        if not self.connected or websocket is None:
            self.logger.warning("Cannot send: WebSocket not connected", state=self._connection_state.name)
            return False

        payload = message if isinstance(message, (str, bytes)) else msgspec.json.encode(message).decode('utf-8')
        try:
            await websocket.send(payload)
            return True
        except Exception as e:
            self.logger.error("Failed to send message", error_type=type(e).__name__, error_message=str(e))
            await self._events.emit(EventName.ERROR, ExchangeConnectionError(503, f"Message send failed: {e}"))
            return False

    # Authentication

    async def authenticate(self) -> bool:
        """
        Send the server.sign request.

        Returns False without sending when credentials are missing or
        placeholders, or when not connected. The outcome arrives later as
        authenticated / authentication_failed.
        """
        credentials = self._credential_provider.get_credentials()
        if not is_usable(credentials):
            self.logger.warning("Cannot authenticate: API credentials not configured")
            return False
        if not self.connected:
            self.logger.warning("Cannot authenticate: WebSocket not connected",
                                state=self._connection_state.name)
            return False

        message = build_auth_message(credentials.api_key, credentials.secret_key)
        self._auth_state = AuthState.PENDING
        if not await self.send(message):
            if self._auth_state == AuthState.PENDING:
                self._auth_state = AuthState.UNAUTHENTICATED
            return False

        self.logger.info("Authentication request sent",
                         access_id=credentials.get_preview(),
                         timestamp=message["params"]["timestamp"])
        return True

    async def wait_for_authentication(self, timeout: Optional[float] = None) -> bool:
        """True once authenticated; False on failure, disconnect or timeout."""
        if self.authenticated:
            return True
        timeout = self.config.auth_timeout if timeout is None else timeout
        return await self._wait(self._auth_waiters, timeout, "authentication")

    async def _wait(self, waiters: List[asyncio.Future], timeout: float, what: str) -> bool:
        waiter = asyncio.get_running_loop().create_future()
        waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Timed out waiting for {what}", timeout_seconds=timeout)
            return False
        finally:
            if waiter in waiters:
                waiters.remove(waiter)

    @staticmethod
    def _resolve_waiters(waiters: List[asyncio.Future], result: bool) -> None:
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(result)
        waiters.clear()

    # Subscriptions

    async def subscribe_to_state(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._subscribe(Topic.STATE, symbol)

    async def subscribe_to_positions(self, symbol: Optional[str] = ALL_MARKETS,
                                     timeout: Optional[float] = None) -> bool:
        return await self._subscribe(Topic.POSITIONS, symbol, auth_timeout=timeout)

    async def subscribe_to_kline(self, symbol: Optional[str] = ALL_MARKETS, period: str = "1min") -> bool:
        return await self._subscribe(Topic.KLINE, symbol, {"period": period})

    async def subscribe_to_trades(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._subscribe(Topic.TRADES, symbol)

    async def subscribe_to_depth(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._subscribe(Topic.DEPTH, symbol)

    async def subscribe_to_market_overview(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._subscribe(Topic.MARKET_OVERVIEW, symbol)

    async def unsubscribe_from_state(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._unsubscribe(Topic.STATE, symbol)

    async def unsubscribe_from_positions(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._unsubscribe(Topic.POSITIONS, symbol)

    async def unsubscribe_from_kline(self, symbol: Optional[str] = ALL_MARKETS, period: str = "1min") -> bool:
        return await self._unsubscribe(Topic.KLINE, symbol, {"period": period})

    async def unsubscribe_from_trades(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._unsubscribe(Topic.TRADES, symbol)

    async def unsubscribe_from_depth(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._unsubscribe(Topic.DEPTH, symbol)

    async def unsubscribe_from_market_overview(self, symbol: Optional[str] = ALL_MARKETS) -> bool:
        return await self._unsubscribe(Topic.MARKET_OVERVIEW, symbol)

    async def _subscribe(self, topic: Topic, symbol: Optional[str],
                         extra_params: Optional[Dict[str, Any]] = None,
                         auth_timeout: Optional[float] = None) -> bool:
        if not self.connected:
            self.logger.warning("Cannot subscribe: WebSocket not connected", topic=topic.value, symbol=symbol)
            return False

        if requires_auth(topic) and not self.authenticated:
            self.logger.info("Waiting for authentication before subscribing", topic=topic.value, symbol=symbol)
            if not await self.wait_for_authentication(auth_timeout) or not self.connected:
                self.logger.warning("Subscription requires authentication", topic=topic.value, symbol=symbol)
                return False

        subscription = Subscription(topic=topic, symbol=symbol, extra_params=extra_params)
        if not await self.send(subscription.to_message(SubscriptionAction.SUBSCRIBE)):
            return False

        self._subscriptions.add(subscription)
        self.logger.info("Subscription request sent", topic=topic.value, symbol=symbol or "all")
        return True

    async def _unsubscribe(self, topic: Topic, symbol: Optional[str],
                           extra_params: Optional[Dict[str, Any]] = None) -> bool:
        self._subscriptions.remove(topic, symbol)
        if not self.connected:
            self.logger.warning("Cannot unsubscribe: WebSocket not connected", topic=topic.value, symbol=symbol)
            return False

        sent = await self.send(build_subscription_message(topic, SubscriptionAction.UNSUBSCRIBE, symbol, extra_params))
        if sent:
            self.logger.info("Unsubscribe request sent", topic=topic.value, symbol=symbol or "all")
        return sent

    async def _replay_subscriptions(self) -> None:
        """Resend tracked subscriptions after a reconnect, authenticating first when needed."""
        subscriptions = self._subscriptions.snapshot()

        if self._subscriptions.requires_auth() and not self.authenticated:
            if await self.authenticate():
                await self.wait_for_authentication()
            if not self.authenticated:
                self.logger.warning("Replaying public subscriptions only: authentication unavailable")

        replayed = 0
        for subscription in subscriptions:
            if not self.connected:
                return
            if requires_auth(subscription.topic) and not self.authenticated:
                continue
            if not self._subscriptions.contains(subscription.topic, subscription.symbol):
                continue
            if await self.send(subscription.to_message(SubscriptionAction.SUBSCRIBE)):
                replayed += 1

        self.logger.info("Subscriptions replayed", replayed=replayed, total=len(subscriptions))

    # Inbound frames

    async def _handle_frame(self, frame: Union[str, bytes]) -> None:
        try:
            message = self._decoder.decode(frame)
        except FrameDecodeError as e:
            self.logger.warning("Dropping undecodable frame", error_message=e.message)
            self.logger.counter("ws_decode_errors", exchange="coinex")
            return
        except Exception as e:
            self.logger.error("Dropping frame after decoder failure",
                              error_type=type(e).__name__, error_message=str(e))
            self.logger.counter("ws_decode_errors", exchange="coinex")
            return

        try:
            await self._dispatch_message(message)
        except Exception as e:
            self.logger.error("Error processing message",
                              error_type=type(e).__name__,
                              error_message=str(e),
                              method=message.get("method"))

    async def _dispatch_message(self, message: Dict[str, Any]) -> None:
        method = message.get("method")
        msg_id = message.get("id")

        if msg_id == AUTH_REQUEST_ID and not isinstance(msg_id, bool):
            await self._handle_auth_response(message)
        elif msg_id is not None and "code" in message and not method:
            await self._handle_ack(message)

        # Pushes without a payload still reach method handlers and message listeners
        data = message.get("data")
        if method == POSITION_UPDATE_METHOD and data is not None:
            await self._events.emit(EventName.POSITION_UPDATE, data)
        elif method == POSITION_SNAPSHOT_METHOD and data is not None:
            await self._events.emit(EventName.POSITION_SNAPSHOT, data)
        elif method == STATE_UPDATE_METHOD and isinstance(data, dict) and data.get("state_list") is not None:
            await self._events.emit(EventName.STATE_UPDATE, data["state_list"])

        if isinstance(method, str) and method:
            await self._method_handlers.emit(method, message)

        await self._events.emit(EventName.MESSAGE, message)

    async def _handle_auth_response(self, message: Dict[str, Any]) -> None:
        code = message.get("code")
        if code == 0:
            if not self.connected:
                self.logger.warning("Ignoring authentication success received while not connected")
                return
            self._auth_state = AuthState.AUTHENTICATED
            self.logger.info("WebSocket authentication successful")
            self.logger.audit("ws_authenticated", exchange="coinex")
            self._resolve_waiters(self._auth_waiters, True)
            await self._events.emit(EventName.AUTHENTICATED)
        else:
            self._auth_state = AuthState.FAILED
            self.logger.warning("WebSocket authentication failed",
                                code=code, server_message=message.get("message") or "Unknown error")
            self._resolve_waiters(self._auth_waiters, False)
            await self._events.emit(EventName.AUTHENTICATION_FAILED, message)

    async def _handle_ack(self, message: Dict[str, Any]) -> None:
        msg_id = message.get("id")
        code = message.get("code")
        lookup = lookup_request_id(msg_id)
        topic_name = lookup[0].value if lookup else "unknown"
        action_name = lookup[1].name.lower() if lookup else "unknown"

        if code == 0:
            self.logger.info("Subscription acknowledged", topic=topic_name, action=action_name, request_id=msg_id)
            return

        error = SubscriptionError(topic_name, code, message.get("message") or "Unknown error", msg_id)
        self.logger.warning("Subscription request rejected",
                            topic=topic_name, action=action_name, request_id=msg_id,
                            code=code, server_message=error.message)
        await self._events.emit(EventName.ERROR, error)
