# protocol/types.py
from __future__ import annotations

# ---- Message types (client -> server, control) ----
NEW_REMOTE_PEER_REQUEST = "NEW_REMOTE_PEER_REQUEST"
COUNTRY_SET = "COUNTRY_SET"
PURPOSE_SET = "PURPOSE_SET"

# ---- Message types (server -> client, control) ----
COUNTRY_DETECTED = "COUNTRY_DETECTED"
NEW_REMOTE_PEER = "NEW_REMOTE_PEER"
REMOTE_COUNTRY_SET = "REMOTE_COUNTRY_SET"

# ---- Transport frames (relayed peer <-> peer by "dst") ----
OPEN = "OPEN"
OFFER = "OFFER"
ANSWER = "ANSWER"
CANDIDATE = "CANDIDATE"
LEAVE = "LEAVE"
EXPIRE = "EXPIRE"
HEARTBEAT = "HEARTBEAT"
ERROR = "ERROR"

RELAY_TYPES = (OFFER, ANSWER, CANDIDATE, LEAVE, EXPIRE)
# an unreachable dst is reported back with EXPIRE only for these
EXPIRING_TYPES = (OFFER, ANSWER, CANDIDATE)

# ---- Matching ----
PURPOSE_DISCUSSION = "discussion"
PURPOSE_DATING = "dating"
PURPOSE_LANGUAGE = "language"
PURPOSE_BROADCAST = "broadcast"

PURPOSES = (PURPOSE_DISCUSSION, PURPOSE_DATING, PURPOSE_LANGUAGE, PURPOSE_BROADCAST)
DEFAULT_PURPOSE = PURPOSE_DISCUSSION
ANY_COUNTRY = "all"

UNKNOWN_COUNTRY_NAME = "Unknown"

# ---- Common error codes ----
ERR_BAD_JSON = "BAD_JSON"

# Minimal shape docs (for human readers)
# Envelope: { "type": str, "payload"?: str, "dst"?: str, "src"?: str,
#             "peerId"?: str, "countryCode"?: str, "countryName"?: str }
# NEW_REMOTE_PEER_REQUEST.payload is itself JSON text: { "countryCode"?, "purpose"? }
