# tests/test_registry.py
from chatroulette.peers import ClientRegistry


def test_add_sets_detected_and_defaults():
    reg = ClientRegistry()
    reg.add("p1", "US", "United States")
    assert reg.has("p1")
    assert reg.count() == 1
    assert reg.get("p1", "country_code") == "US"
    assert reg.get("p1", "country_code_detected") == "US"
    assert reg.get("p1", "country_name_detected") == "United States"
    assert reg.get("p1", "purpose") == "discussion"
    assert reg.get("p1", "connected_at") > 0


def test_add_twice_last_write_wins():
    reg = ClientRegistry()
    reg.add("p1", "US", "United States")
    reg.set("p1", "purpose", "dating")
    reg.add("p1", "GB", "United Kingdom")
    assert reg.count() == 1
    assert reg.get("p1", "country_code") == "GB"
    assert reg.get("p1", "purpose") == "discussion"


def test_remove():
    reg = ClientRegistry()
    reg.add("p1", "US", "United States")
    reg.remove("p1")
    assert not reg.has("p1")
    assert reg.count() == 0


def test_remove_unknown_does_not_raise():
    reg = ClientRegistry()
    reg.remove("nonexistent")
    assert reg.count() == 0


def test_get_defaults():
    reg = ClientRegistry()
    reg.add("p1", "", "Unknown")
    assert reg.get("nonexistent", "country_code", "default") == "default"
    assert reg.get(None, "country_code", "default") == "default"
    assert reg.get("", "country_code", "default") == "default"
    assert reg.get(42, "country_code", "default") == "default"
    # unset (empty) attribute falls back too
    assert reg.get("p1", "country_code", "all") == "all"
    assert reg.get("p1", "no_such_field", "x") == "x"


def test_set():
    reg = ClientRegistry()
    reg.add("p1", "US", "United States")
    reg.set("p1", "country_code", "RU")
    assert reg.get("p1", "country_code") == "RU"
    # detected country is a snapshot
    assert reg.get("p1", "country_code_detected") == "US"


def test_set_unknown_peer_is_noop():
    reg = ClientRegistry()
    reg.set("nonexistent", "country_code", "RU")
    assert not reg.has("nonexistent")
    assert reg.count() == 0


def test_all():
    reg = ClientRegistry()
    reg.add("p1", "US", "United States")
    reg.add("p2", "RU", "Russia")
    peers = reg.all()
    assert set(peers) == {"p1", "p2"}
    assert peers["p2"]["country_name_detected"] == "Russia"
