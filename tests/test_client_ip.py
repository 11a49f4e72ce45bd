# tests/test_client_ip.py
from websockets.datastructures import Headers

from chatroulette.routing.client_ip import extract_real_ip


def test_x_real_ip_first():
    headers = {"X-Real-IP": "1.2.3.4", "X-Forwarded-For": "5.6.7.8, 9.10.11.12"}
    assert extract_real_ip(headers, ("127.0.0.1", 5555)) == "1.2.3.4"


def test_forwarded_for_first_hop():
    assert extract_real_ip({"X-Forwarded-For": "192.0.2.101, 10.0.0.1, 172.16.0.1"}, None) == "192.0.2.101"
    assert extract_real_ip({"x-forwarded-for": "198.51.100.73"}, None) == "198.51.100.73"


def test_socket_address_fallback():
    assert extract_real_ip({}, ("127.0.0.1", 5555)) == "127.0.0.1"
    assert extract_real_ip(None, ("::1", 5555, 0, 0)) == "::1"


def test_v4_mapped_prefix_stripped():
    assert extract_real_ip({"X-Real-IP": "::ffff:203.0.113.42"}, None) == "203.0.113.42"
    assert extract_real_ip({"X-Forwarded-For": "::ffff:198.51.100.7, 10.0.0.1"}, None) == "198.51.100.7"
    assert extract_real_ip({}, ("::ffff:10.1.2.3", 1)) == "10.1.2.3"


def test_nothing_known():
    assert extract_real_ip({}, None) == ""


def test_websockets_headers_case_insensitive():
    headers = Headers()
    headers["x-real-ip"] = "203.0.113.9"
    assert extract_real_ip(headers, ("127.0.0.1", 1)) == "203.0.113.9"
