from __future__ import annotations

import logging

from protocol.types import ANSWER, COUNTRY_SET, NEW_REMOTE_PEER_REQUEST, PURPOSE_SET
from chatroulette.routing.transport import Link, TransportServer
from .context import Context
from .protocol_handlers import (
    handle_ANSWER,
    handle_COUNTRY_SET,
    handle_NEW_REMOTE_PEER_REQUEST,
    handle_PURPOSE_SET,
    handle_peer_connected,
    handle_peer_disconnected,
    handle_unknown,
)

log = logging.getLogger(__name__)


def adapt(ctx: Context, handler):
    async def _wrapped(frame, link: Link):
        await handler(ctx, link, frame)
    return _wrapped


def adapt_hook(ctx: Context, hook):
    async def _wrapped(link: Link):
        await hook(ctx, link)
    return _wrapped


async def _log_error(exc: BaseException, link) -> None:
    log.error("error while handling %s", link.tag() if link else "transport event", exc_info=exc)


def bind_lifecycle(server: TransportServer, ctx: Context) -> TransportServer:
    ''' Wire the transport's connect / disconnect / message / error events to the handlers. '''
    server.on_connect(adapt_hook(ctx, handle_peer_connected))
    server.on_disconnect(adapt_hook(ctx, handle_peer_disconnected))
    server.on_error(_log_error)

    server.on(NEW_REMOTE_PEER_REQUEST, adapt(ctx, handle_NEW_REMOTE_PEER_REQUEST))
    server.on(COUNTRY_SET,             adapt(ctx, handle_COUNTRY_SET))
    server.on(PURPOSE_SET,             adapt(ctx, handle_PURPOSE_SET))
    server.on(ANSWER,                  adapt(ctx, handle_ANSWER))
    server.set_fallback(adapt(ctx, handle_unknown))

    server.set_status_provider(ctx.status)
    if ctx.settings.admin_enabled:
        server.set_admin_provider(ctx.snapshot)
    return server
