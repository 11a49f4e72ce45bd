"""
Offline IP -> country lookup over a MaxMind GeoLite2/GeoIP2 Country database.

Every failure (no database, malformed address, address not in the database)
degrades to UNKNOWN_COUNTRY. Callers never see an exception.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

import geoip2.database
from geoip2.errors import GeoIP2Error
from maxminddb import InvalidDatabaseError

from protocol.types import UNKNOWN_COUNTRY_NAME

logger = logging.getLogger(__name__)


class GeoResult(NamedTuple):
    country_code: str
    country_name: str


UNKNOWN_COUNTRY = GeoResult("", UNKNOWN_COUNTRY_NAME)


class GeoLocator:
    """
    reader is anything with country(ip) returning a record whose .country has
    .iso_code and .names (geoip2.database.Reader in production).
    """

    def __init__(self, reader: Any = None):
        self._reader = reader

    @classmethod
    def open(cls, db_path: Optional[str]) -> "GeoLocator":
        """Load the database once at startup; a missing/broken file is logged once."""
        if not db_path:
            logger.warning("GeoIP database not configured; all peers will be 'Unknown'")
            return cls(None)
        try:
            reader = geoip2.database.Reader(db_path)
        except (OSError, ValueError, InvalidDatabaseError) as e:
            logger.warning("GeoIP database %s unavailable (%s); all peers will be 'Unknown'", db_path, e)
            return cls(None)
        logger.info("GeoIP database loaded: %s", db_path)
        return cls(reader)

    @property
    def available(self) -> bool:
        return self._reader is not None

    def lookup(self, ip_address: Any) -> GeoResult:
        if self._reader is None or not ip_address or not isinstance(ip_address, str):
            return UNKNOWN_COUNTRY
        try:
            record = self._reader.country(ip_address)
        except (ValueError, TypeError, GeoIP2Error, InvalidDatabaseError) as e:
            logger.debug("geo lookup failed for %r: %s", ip_address, e)
            return UNKNOWN_COUNTRY

        country = getattr(record, "country", None)
        code = getattr(country, "iso_code", None) or ""
        names = getattr(country, "names", None) or {}
        name = names.get("en") or UNKNOWN_COUNTRY_NAME
        if not code:
            return UNKNOWN_COUNTRY
        return GeoResult(code, name)

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
