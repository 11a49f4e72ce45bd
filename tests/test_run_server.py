# tests/test_run_server.py
import asyncio
import json

from websockets.asyncio.client import connect

from chatroulette.config import Settings
from chatroulette.run_server import build_server


def test_built_server_accepts_default_path(monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    monkeypatch.setenv("KEY", "something-else")
    settings = Settings(_env_file=None, HOST="127.0.0.1", PORT=0, GEOIP_DB_PATH=None)

    async def scenario():
        server = build_server(settings)
        await server.start()
        uri = f"ws://127.0.0.1:{server.port}/openchatroulette/peerjs?key=peerjs&id=p1&token=t"
        try:
            async with connect(uri, additional_headers={"X-Real-IP": "8.8.8.8"}) as ws:
                assert json.loads(await asyncio.wait_for(ws.recv(), timeout=5)) == {"type": "OPEN"}
                # no GeoIP database configured
                detected = json.loads(await asyncio.wait_for(ws.recv(), timeout=5))
                assert detected == {"type": "COUNTRY_DETECTED", "countryCode": "", "countryName": "Unknown"}
        finally:
            await server.stop()
    asyncio.run(scenario())
