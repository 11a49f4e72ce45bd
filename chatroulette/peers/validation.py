import json
import logging
import re
from typing import Any, Iterable, Optional

from protocol.types import DEFAULT_PURPOSE, PURPOSES

logger = logging.getLogger(__name__)

_NON_LETTERS = re.compile(r"[^A-Z]")


def sanitize_country_code(code: Any) -> str:
    """Uppercase, keep A-Z only, cut to two letters. Anything else is "" (any country)."""
    if not isinstance(code, str):
        return ""
    sanitized = _NON_LETTERS.sub("", code.upper())[:2]
    return sanitized if len(sanitized) == 2 else ""


def sanitize_purpose(purpose: Any, allowed: Iterable[str] = PURPOSES) -> str:
    """Return purpose if it is on the allow-list, otherwise the default purpose."""
    if not isinstance(purpose, str):
        return DEFAULT_PURPOSE
    return purpose if purpose in allowed else DEFAULT_PURPOSE


def safe_json_parse(text: Any) -> Optional[Any]:
    """Parse JSON text; None (and a warning) when it is not valid JSON."""
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        logger.warning("JSON parse error: %s", e)
        return None
