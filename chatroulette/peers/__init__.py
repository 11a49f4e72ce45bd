from .registry import ClientRegistry, Peer
from .matcher import WaitingQueueMatcher
from .validation import sanitize_country_code, sanitize_purpose, safe_json_parse

__all__ = [
    "ClientRegistry",
    "Peer",
    "WaitingQueueMatcher",
    "sanitize_country_code",
    "sanitize_purpose",
    "safe_json_parse",
]
