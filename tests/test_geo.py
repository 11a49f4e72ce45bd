# tests/test_geo.py
from chatroulette.geo import UNKNOWN_COUNTRY, GeoLocator
from fakes import StubReader


def test_lookup_known_address():
    geo = GeoLocator(StubReader())
    assert geo.lookup("8.8.8.8") == ("US", "United States")
    assert geo.lookup("81.2.69.160").country_name == "United Kingdom"


def test_unparsable_address_is_unknown():
    geo = GeoLocator(StubReader())
    assert geo.lookup("not-an-ip") == UNKNOWN_COUNTRY
    assert geo.lookup("not-an-ip").country_code == ""
    assert geo.lookup("not-an-ip").country_name == "Unknown"


def test_address_not_in_database_is_unknown():
    geo = GeoLocator(StubReader())
    assert geo.lookup("10.0.0.1") == UNKNOWN_COUNTRY


def test_empty_input_skips_reader():
    reader = StubReader()
    geo = GeoLocator(reader)
    assert geo.lookup("") == UNKNOWN_COUNTRY
    assert geo.lookup(None) == UNKNOWN_COUNTRY
    assert reader.calls == []


def test_no_database_is_unknown():
    geo = GeoLocator(None)
    assert not geo.available
    assert geo.lookup("8.8.8.8") == UNKNOWN_COUNTRY


def test_open_missing_file_degrades(tmp_path, caplog):
    with caplog.at_level("WARNING"):
        geo = GeoLocator.open(str(tmp_path / "missing.mmdb"))
    assert not geo.available
    assert "unavailable" in caplog.text
    assert geo.lookup("8.8.8.8") == UNKNOWN_COUNTRY


def test_open_unconfigured():
    assert not GeoLocator.open(None).available


def test_record_without_iso_code_is_unknown():
    geo = GeoLocator(StubReader({"1.1.1.1": (None, "Somewhere")}))
    assert geo.lookup("1.1.1.1") == UNKNOWN_COUNTRY
