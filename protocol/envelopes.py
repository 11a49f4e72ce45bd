# protocol/envelopes.py
"""
Control-frame codec.

Inbound frames are decoded once into one frozen dataclass per message type so
handlers never poke at raw dict keys. Outbound frames are plain dicts built by
the helpers at the bottom of this module.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .types import (
    ANSWER, COUNTRY_DETECTED, COUNTRY_SET, ERROR, EXPIRE, HEARTBEAT,
    NEW_REMOTE_PEER, NEW_REMOTE_PEER_REQUEST, OPEN, PURPOSE_SET,
    RELAY_TYPES, REMOTE_COUNTRY_SET,
)


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


# ---- inbound variants ----

@dataclass(frozen=True)
class NewRemotePeerRequest:
    payload: Optional[str] = None
    type: str = NEW_REMOTE_PEER_REQUEST


@dataclass(frozen=True)
class CountrySet:
    payload: Any = None
    type: str = COUNTRY_SET


@dataclass(frozen=True)
class PurposeSet:
    payload: Any = None
    type: str = PURPOSE_SET


@dataclass(frozen=True)
class Answer:
    dst: str = ""
    payload: Any = None
    type: str = ANSWER


@dataclass(frozen=True)
class Relay:
    """OFFER / CANDIDATE / LEAVE / EXPIRE, opaque to the server."""
    type: str
    dst: str = ""
    payload: Any = None


@dataclass(frozen=True)
class Heartbeat:
    type: str = HEARTBEAT


@dataclass(frozen=True)
class UnknownFrame:
    type: str = ""


Frame = Union[NewRemotePeerRequest, CountrySet, PurposeSet, Answer, Relay, Heartbeat, UnknownFrame]


def decode_frame(obj: Any) -> Frame:
    """
    Map a parsed JSON value to its frame variant.
    Anything that is not an object with a string "type" is an UnknownFrame.
    """
    if not isinstance(obj, dict):
        return UnknownFrame()
    t = obj.get("type")
    if not isinstance(t, str):
        return UnknownFrame()

    payload = obj.get("payload")
    dst = _opt_str(obj.get("dst")) or ""

    if t == NEW_REMOTE_PEER_REQUEST:
        return NewRemotePeerRequest(payload=_opt_str(payload))
    if t == COUNTRY_SET:
        return CountrySet(payload=payload)
    if t == PURPOSE_SET:
        return PurposeSet(payload=payload)
    if t == ANSWER:
        return Answer(dst=dst, payload=payload)
    if t in RELAY_TYPES:
        return Relay(type=t, dst=dst, payload=payload)
    if t == HEARTBEAT:
        return Heartbeat()
    return UnknownFrame(type=t)


# ---- outbound builders ----

def open_frame() -> Dict[str, Any]:
    return {"type": OPEN}


def country_detected(country_code: str, country_name: str) -> Dict[str, Any]:
    return {"type": COUNTRY_DETECTED, "countryCode": country_code, "countryName": country_name}


def new_remote_peer(peer_id: str, country_code: str) -> Dict[str, Any]:
    return {"type": NEW_REMOTE_PEER, "peerId": peer_id, "countryCode": country_code}


def remote_country_set(peer_id: str, country_code: str) -> Dict[str, Any]:
    return {"type": REMOTE_COUNTRY_SET, "peerId": peer_id, "countryCode": country_code}


def expire(src: str, dst: str) -> Dict[str, Any]:
    return {"type": EXPIRE, "src": src, "dst": dst}


def error(code: str, detail: str) -> Dict[str, Any]:
    return {"type": ERROR, "payload": {"code": code, "detail": detail}}
