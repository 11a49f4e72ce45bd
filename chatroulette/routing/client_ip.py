from __future__ import annotations

from typing import Any, Mapping, Optional

_V4_MAPPED = "::ffff:"


def _header(headers: Optional[Mapping[str, str]], name: str) -> str:
    if not headers:
        return ""
    value = headers.get(name)
    if value is None:
        # plain dicts are case-sensitive, websockets.Headers is not
        lname = name.lower()
        for k, v in headers.items():
            if k.lower() == lname:
                value = v
                break
    return str(value).strip() if value else ""


def _strip_v4_mapped(ip: str) -> str:
    return ip[len(_V4_MAPPED):] if ip.lower().startswith(_V4_MAPPED) else ip


def extract_real_ip(headers: Optional[Mapping[str, str]], remote_address: Any) -> str:
    """
    Client IP as seen by the fronting proxy:
    X-Real-IP, else first X-Forwarded-For hop, else the socket peer address.
    """
    real_ip = _header(headers, "X-Real-IP")
    if real_ip:
        return _strip_v4_mapped(real_ip)

    forwarded = _header(headers, "X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return _strip_v4_mapped(first)

    if isinstance(remote_address, (tuple, list)) and remote_address:
        return _strip_v4_mapped(str(remote_address[0]))
    if isinstance(remote_address, str):
        return _strip_v4_mapped(remote_address)
    return ""
