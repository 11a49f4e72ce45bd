'''
    Description:
        - This is the main entry point for running the matching / signaling server.
          It loads settings, opens the GeoIP database, builds the context and
          binds it to the WebSocket transport.
'''

# ==== Imports ====
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from chatroulette.config import Settings, get_settings
from chatroulette.routing.transport import TransportServer
from chatroulette.server import bind_lifecycle, make_context

log = logging.getLogger("chatroulette.run_server")


# ==== Functions ====

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.effective_log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # websockets logs every handshake at INFO
    logging.getLogger("websockets").setLevel(logging.WARNING)


def build_server(settings: Settings) -> TransportServer:
    context = make_context(settings)
    server = TransportServer(
        host=settings.host,
        port=settings.port,
        path=settings.path,
        key=settings.key,
        ping_interval=settings.ping_interval,
        ping_timeout=settings.ping_timeout,
        max_size=settings.max_message_size,
    )
    return bind_lifecycle(server, context)


async def main(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    server = build_server(settings)
    await server.start()
    log.info("Server ready (environment=%s)", settings.environment)
    try:
        await asyncio.Future()  # run forever
    finally:
        await server.stop()


def run() -> None:
    settings = get_settings()
    configure_logging(settings)
    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        log.info("Shutting down")


if __name__ == "__main__":
    run()
