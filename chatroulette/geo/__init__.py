from .locator import GeoLocator, GeoResult, UNKNOWN_COUNTRY

__all__ = ["GeoLocator", "GeoResult", "UNKNOWN_COUNTRY"]
