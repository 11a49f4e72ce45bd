'''
    Description:
        - This module defines the Context class, which bundles the server's state:
          settings, the peer registry, the waiting-slot matcher and the geo locator.
        - Handlers receive the context instead of reaching for module globals.
'''

from __future__ import annotations

from typing import Any, Dict, Optional

from chatroulette.config import Settings
from chatroulette.geo import GeoLocator
from chatroulette.peers import ClientRegistry, WaitingQueueMatcher


class Context:
    def __init__(self, settings: Settings, registry: Optional[ClientRegistry] = None,
                 matcher: Optional[WaitingQueueMatcher] = None, locator: Optional[GeoLocator] = None):
        self.settings = settings

        # peers connected to *this* server
        self.registry = registry or ClientRegistry()
        # one waiting peer per (country, purpose); reads live attributes from the registry
        self.matcher = matcher or WaitingQueueMatcher(self.registry)
        # no reader -> every lookup is "Unknown"
        self.locator = locator or GeoLocator(None)

    def status(self) -> Dict[str, Any]:
        return {"registered": self.registry.count(), "waiting": self.matcher.waiting_count()}

    def snapshot(self) -> Dict[str, Any]:
        return {"peers": self.registry.all(), "waiting": self.matcher.snapshot()}


def make_context(settings: Settings) -> Context:
    return Context(settings=settings, locator=GeoLocator.open(settings.geoip_db_path))
