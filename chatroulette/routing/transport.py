# chatroulette/routing/transport.py

"""
Signaling transport (WebSocket) layer

- One WebSocket listener; peers connect to {path}/peerjs?key=<key>&id=<peer id>.
- Exactly ONE JSON object per WebSocket text frame.
- OPEN is sent on accept, then the "connect" hooks run.
- OFFER / ANSWER / CANDIDATE / LEAVE / EXPIRE carrying a "dst" are relayed to
  that peer with "src" filled in; the frame is still dispatched afterwards.
- Every connect / disconnect / message is handled under one lock, so hooks and
  handlers never interleave. Frames sent while the lock is held are queued and
  written after it is released; a peer that stops reading only stalls the event
  that wrote to it.
- Plain HTTP: {path}/health, and {path}/admin/state when an admin provider is set.

"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve

from protocol import envelopes
from protocol.envelopes import Frame, Heartbeat, decode_frame
from protocol.types import ERR_BAD_JSON, EXPIRING_TYPES, RELAY_TYPES
from .client_ip import extract_real_ip

logger = logging.getLogger("chatroulette.transport")

# ------------ Types ------------------------------------------------------------

Handler = Callable[[Frame, "Link"], Awaitable[None]]
LinkHook = Callable[["Link"], Awaitable[None]]
ErrorHook = Callable[[BaseException, Optional["Link"]], Awaitable[None]]
Provider = Callable[[], Dict[str, Any]]

# frames produced inside the locked section of the current event, flushed after unlock
_outbox: ContextVar[Optional[List[Tuple["Link", Dict[str, Any]]]]] = ContextVar("outbox", default=None)


@dataclass
class Link:

    """A connected peer."""

    ws: Any                   # ServerConnection (or a stand-in with async send/close)
    peer_id: str
    remote_ip: str = ""
    connected_at: float = field(default_factory=time.time)
    last_seen: float = field(default_factory=time.time)

    def tag(self) -> str:
        return f"peer:{self.peer_id}"

    async def send(self, obj: Dict[str, Any]) -> bool:
        """Send one frame; False if the channel is already gone. Deferred while the event lock is held."""
        pending = _outbox.get()
        if pending is not None:
            pending.append((self, obj))
            return True
        return await self.write(obj)

    async def write(self, obj: Dict[str, Any]) -> bool:
        try:
            await self.ws.send(json.dumps(obj, separators=(",", ":"), ensure_ascii=False))
            return True
        except websockets.ConnectionClosed:
            logger.debug("send to closed link %s dropped (%s)", self.tag(), obj.get("type"))
            return False


@dataclass
class State:

    links: Dict[str, Link] = field(default_factory=dict)    # peer_id -> Link


def _query_param(query: Dict[str, List[str]], name: str) -> str:
    values = query.get(name) or [""]
    return values[0]


# ------------------------------ Transport Server --------------------------------

class TransportServer:

    """
    WebSocket listener for browser peers.

    - register message handlers via .on(msg_type, async handler(frame, link))
    - unregistered control types go to .set_fallback(handler)
    - lifecycle hooks via .on_connect / .on_disconnect / .on_error
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 9000,
        *,
        path: str = "/openchatroulette",
        key: str = "peerjs",
        state: Optional[State] = None,
        ping_interval: Optional[int] = 20,
        ping_timeout: Optional[int] = 20,
        max_size: Optional[int] = 2**16,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._host = host
        self._port = port
        self.path = "/" + path.strip("/") if path.strip("/") else ""
        self.key = key
        self.state = state or State()
        self._handlers: Dict[str, Handler] = {}
        self._fallback: Optional[Handler] = None
        self._connect_hooks: List[LinkHook] = []
        self._disconnect_hooks: List[LinkHook] = []
        self._error_hooks: List[ErrorHook] = []
        self._status_provider: Optional[Provider] = None
        self._admin_provider: Optional[Provider] = None
        self._server: Optional[Server] = None
        self._ws_kwargs = dict(ping_interval=ping_interval, ping_timeout=ping_timeout, max_size=max_size)
        self._lock = asyncio.Lock()

        self.log = log or logger

    # ---- public API -----------------------------------------------------------

    def on(self, msg_type: str, handler: Handler) -> None:

        """Register an async handler for a message type."""

        self._handlers[msg_type] = handler

    def set_fallback(self, handler: Handler) -> None:
        self._fallback = handler

    def on_connect(self, hook: LinkHook) -> None:
        self._connect_hooks.append(hook)

    def on_disconnect(self, hook: LinkHook) -> None:
        self._disconnect_hooks.append(hook)

    def on_error(self, hook: ErrorHook) -> None:
        self._error_hooks.append(hook)

    def set_status_provider(self, provider: Provider) -> None:
        self._status_provider = provider

    def set_admin_provider(self, provider: Optional[Provider]) -> None:
        self._admin_provider = provider

    @property
    def port(self) -> int:

        """Bound port (useful when started with port 0)."""

        if self._server is None:
            return self._port
        for sock in self._server.sockets:
            return sock.getsockname()[1]
        return self._port

    async def start(self) -> None:

        """Start the WebSocket listener."""

        self._server = await serve(
            self._conn_handler,
            self._host,
            self._port,
            process_request=self._process_request,
            **self._ws_kwargs,
        )
        self.log.info("WebSocket listening on ws://%s:%d%s", self._host, self.port, self.path)

    async def stop(self) -> None:

        """Gracefully stop the server and close connections."""

        for link in list(self.state.links.values()):
            try:
                await link.ws.close(code=1001, reason="server shutting down")
            except websockets.ConnectionClosed:
                pass
        if self._server:
            self._server.close()
            await self._server.wait_closed()
        self.state.links.clear()

    # ---- plain HTTP before the upgrade ----------------------------------------

    def _process_request(self, connection: ServerConnection, request):
        parts = urlsplit(request.path)
        route = parts.path.rstrip("/")

        if route == f"{self.path}/health":
            body = {"status": "ok", "peers": len(self.state.links)}
            if self._status_provider:
                body.update(self._status_provider())
            return self._json_response(connection, body)

        if route == f"{self.path}/admin/state":
            if self._admin_provider is None:
                return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
            return self._json_response(connection, self._admin_provider())

        if self.path and not (route == self.path or route.startswith(self.path + "/")):
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")

        query = parse_qs(parts.query)
        if _query_param(query, "key") != self.key:
            return connection.respond(HTTPStatus.UNAUTHORIZED, "Invalid key provided\n")
        if not _query_param(query, "id"):
            return connection.respond(HTTPStatus.BAD_REQUEST, "No id provided\n")
        return None

    @staticmethod
    def _json_response(connection: ServerConnection, body: Dict[str, Any]):
        response = connection.respond(HTTPStatus.OK, json.dumps(body))
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    @asynccontextmanager
    async def _serialized(self):

        """Run one event under the lock; frames it sends go out once the lock is released."""

        pending: List[Tuple[Link, Dict[str, Any]]] = []
        token = _outbox.set(pending)
        try:
            async with self._lock:
                yield
        finally:
            _outbox.reset(token)
        for target, obj in pending:
            await target.write(obj)

    # ---- connection lifecycle -------------------------------------------------

    async def _conn_handler(self, ws: ServerConnection) -> None:
        query = parse_qs(urlsplit(ws.request.path).query)
        peer_id = _query_param(query, "id")
        link = Link(
            ws=ws,
            peer_id=peer_id,
            remote_ip=extract_real_ip(ws.request.headers, ws.remote_address),
        )
        replaced = await self.attach(link)
        if replaced is not None:
            try:
                await replaced.ws.close(code=1000, reason="replaced")
            except websockets.ConnectionClosed:
                pass

        try:
            async for message in ws:
                await self.handle_frame(message, link)
        except websockets.ConnectionClosed:
            pass
        finally:
            await self.detach(link)

    async def attach(self, link: Link) -> Optional[Link]:

        """
        Register a link and run the connect hooks.
        A link already holding the same id is detached first (last login wins)
        and returned so the caller can close it.
        """

        async with self._serialized():
            old = self.state.links.pop(link.peer_id, None)
            if old is not None:
                self.log.info("replacing %s", old.tag())
                await self._run_hooks(self._disconnect_hooks, old)
            self.state.links[link.peer_id] = link
            self.log.info("connected: %s from %s", link.tag(), link.remote_ip or "?")
            await link.send(envelopes.open_frame())
            await self._run_hooks(self._connect_hooks, link)
        return old

    async def detach(self, link: Link) -> None:
        async with self._serialized():
            # a replaced link was already detached by attach()
            if self.state.links.get(link.peer_id) is not link:
                return
            self.state.links.pop(link.peer_id, None)
            await self._run_hooks(self._disconnect_hooks, link)
        self.log.info("disconnected: %s", link.tag())

    async def handle_frame(self, message: Any, link: Link) -> None:

        """Parse, relay if addressed to another peer, then dispatch."""

        link.last_seen = time.time()
        try:
            obj = json.loads(message)
        except ValueError:
            self.log.warning("invalid JSON from %s", link.tag())
            await link.send(envelopes.error(ERR_BAD_JSON, "invalid_json"))
            return

        frame = decode_frame(obj)
        if isinstance(frame, Heartbeat):
            return

        async with self._serialized():
            if frame.type in RELAY_TYPES:
                await self._relay(obj, frame, link)
            await self._dispatch(frame, link)

    async def _relay(self, obj: Dict[str, Any], frame: Frame, link: Link) -> None:
        if not frame.dst:
            self.log.debug("%s from %s without dst", frame.type, link.tag())
            return
        target = self.state.links.get(frame.dst)
        if target is None:
            if frame.type in EXPIRING_TYPES:
                await link.send(envelopes.expire(frame.dst, link.peer_id))
            self.log.debug("%s from %s to offline %s", frame.type, link.tag(), frame.dst)
            return
        forwarded = dict(obj)
        forwarded["src"] = link.peer_id
        await target.send(forwarded)

    async def _dispatch(self, frame: Frame, link: Link) -> None:

        """Dispatch by message type. Pure relay frames without a handler stop here."""

        handler = self._handlers.get(frame.type)
        if handler is None:
            if frame.type in RELAY_TYPES:
                return
            handler = self._fallback
        if handler is None:
            self.log.debug("no handler for %s from %s", frame.type, link.tag())
            return
        try:
            await handler(frame, link)
        except Exception as e:
            await self._report(e, link)

    async def _run_hooks(self, hooks: List[LinkHook], link: Link) -> None:
        for hook in hooks:
            try:
                await hook(link)
            except Exception as e:
                await self._report(e, link)

    async def _report(self, exc: BaseException, link: Optional[Link]) -> None:
        if not self._error_hooks:
            self.log.error("handler error on %s", link.tag() if link else "-", exc_info=exc)
            return
        for hook in self._error_hooks:
            try:
                await hook(exc, link)
            except Exception:
                self.log.exception("error hook failed")


Transport = TransportServer
__all__ = ["TransportServer", "Transport", "Link", "State"]
