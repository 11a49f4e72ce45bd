'''
    Description:
        - Single-slot rendezvous per (country, purpose) key.
        - A peer asking for a partner either takes whoever is waiting under its
          key, or becomes the waiting peer itself. Not a FIFO: one waiter per key.
'''

from __future__ import annotations

import logging
from typing import Dict, Tuple

from protocol.types import ANY_COUNTRY, DEFAULT_PURPOSE
from .registry import ClientRegistry, PeerID

logger = logging.getLogger(__name__)

SlotKey = Tuple[str, str]   # (country code or "all", purpose)


class WaitingQueueMatcher:
    def __init__(self, registry: ClientRegistry):
        self.registry = registry
        # Slots are created lazily and never deleted; the key space is bounded
        # by countries x purposes.
        self.slots: Dict[SlotKey, PeerID] = {}

    def key_for(self, peer_id: PeerID) -> SlotKey:
        """Current matching key, read live from the registry."""
        return (
            self.registry.get(peer_id, "country_code", ANY_COUNTRY),
            self.registry.get(peer_id, "purpose", DEFAULT_PURPOSE),
        )

    def waiting_value(self, peer_id: PeerID) -> PeerID:
        return self.slots.setdefault(self.key_for(peer_id), "")

    def next_peer_id(self, peer_id: PeerID) -> PeerID:
        """
        Return the id of the peer to call, or "" when peer_id has to wait.

        - someone else waits under the same key -> take them, slot emptied
        - slot empty                            -> peer_id becomes the waiter
        - peer_id already waits                 -> no change
        Unknown or empty ids never touch the slots.
        """
        if not self.registry.has(peer_id):
            return ""

        key = self.key_for(peer_id)
        waiting = self.slots.setdefault(key, "")

        if waiting and not self.registry.has(waiting):
            # waiter vanished without its slot being cleared
            logger.warning("dropping stale waiter %s from %s", waiting, key)
            self.slots[key] = waiting = ""

        if waiting and waiting != peer_id:
            self.slots[key] = ""
            logger.info("matched %s with %s on %s", peer_id, waiting, key)
            return waiting

        if not waiting:
            self.slots[key] = peer_id
            logger.debug("%s waiting on %s", peer_id, key)
        return ""

    def clear_waiting_data(self, peer_id: PeerID) -> None:
        key = self.key_for(peer_id)
        if self.slots.get(key) == peer_id:
            self.slots[key] = ""
            logger.debug("%s released %s", peer_id, key)

    def waiting_count(self) -> int:
        return sum(1 for v in self.slots.values() if v)

    def snapshot(self) -> Dict[str, Dict[str, PeerID]]:
        """Nested {country: {purpose: peer_id}} copy of the slots."""
        out: Dict[str, Dict[str, PeerID]] = {}
        for (country, purpose), value in self.slots.items():
            out.setdefault(country, {})[purpose] = value
        return out
