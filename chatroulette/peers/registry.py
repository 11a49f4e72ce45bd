'''
    Description:
        - In-memory table of the peers connected to this server and their
          matching attributes. Single source of truth for peer existence.
'''

# ========== Imports ==========
from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from protocol.types import DEFAULT_PURPOSE

logger = logging.getLogger(__name__)

PeerID = str


@dataclass
class Peer:
    peer_id: PeerID
    country_code: str                  # "" means any country
    country_code_detected: str         # geo lookup at connect time, never changes
    country_name_detected: str
    purpose: str = DEFAULT_PURPOSE
    connected_at: float = field(default_factory=time.time)


# ========== Registry Class ==========
class ClientRegistry:
    def __init__(self):
        self.peers: Dict[PeerID, Peer] = {}

    def add(self, peer_id: PeerID, country_code: str, country_name: str) -> Peer:
        # same id twice: last write wins
        peer = Peer(
            peer_id=peer_id,
            country_code=country_code,
            country_code_detected=country_code,
            country_name_detected=country_name,
        )
        self.peers[peer_id] = peer
        logger.debug("peer added: %s (%s)", peer_id, country_code or "-")
        return peer

    def remove(self, peer_id: PeerID) -> None:
        # Callers clear the peer's waiting slot first, it is keyed on these attributes.
        if self.peers.pop(peer_id, None) is not None:
            logger.debug("peer removed: %s", peer_id)

    def has(self, peer_id: PeerID) -> bool:
        return isinstance(peer_id, str) and peer_id in self.peers

    def get(self, peer_id: PeerID, key: str, default: Any = "") -> Any:
        """
        Read one attribute of a peer.
        Falls back to default for an empty/non-string id, an unknown peer, or an
        unset (empty) attribute.
        """
        if not peer_id or not isinstance(peer_id, str):
            return default
        peer = self.peers.get(peer_id)
        if peer is None:
            return default
        return getattr(peer, key, None) or default

    def set(self, peer_id: PeerID, key: str, value: Any) -> None:
        peer = self.peers.get(peer_id) if isinstance(peer_id, str) else None
        if peer is None:
            return
        setattr(peer, key, value)

    def count(self) -> int:
        return len(self.peers)

    def all(self) -> Dict[PeerID, Dict[str, Any]]:
        return {pid: asdict(peer) for pid, peer in self.peers.items()}
