# tests/test_validation.py
from chatroulette.peers.validation import safe_json_parse, sanitize_country_code, sanitize_purpose


def test_country_code_uppercases_and_truncates():
    assert sanitize_country_code("us") == "US"
    assert sanitize_country_code("RU") == "RU"
    assert sanitize_country_code("USA") == "US"


def test_country_code_strips_non_letters():
    assert sanitize_country_code("U1S2") == "US"
    assert sanitize_country_code(" g-b ") == "GB"


def test_country_code_rejects_short_or_non_string():
    assert sanitize_country_code("A") == ""
    assert sanitize_country_code("") == ""
    assert sanitize_country_code("12") == ""
    assert sanitize_country_code(123) == ""
    assert sanitize_country_code(None) == ""
    assert sanitize_country_code(["US"]) == ""


def test_purpose_allow_list():
    assert sanitize_purpose("dating") == "dating"
    assert sanitize_purpose("language") == "language"
    assert sanitize_purpose("broadcast") == "broadcast"
    assert sanitize_purpose("discussion") == "discussion"


def test_purpose_defaults():
    assert sanitize_purpose("invalid") == "discussion"
    assert sanitize_purpose("DATING") == "discussion"
    assert sanitize_purpose(None) == "discussion"
    assert sanitize_purpose(123) == "discussion"


def test_purpose_custom_allow_list():
    assert sanitize_purpose("broadcast", allowed=["discussion", "dating"]) == "discussion"
    assert sanitize_purpose("dating", allowed=["discussion", "dating"]) == "dating"


def test_safe_json_parse():
    assert safe_json_parse('{"key": "value"}') == {"key": "value"}
    assert safe_json_parse('{"a": {"b": 1}}')["a"]["b"] == 1
    assert safe_json_parse("not json") is None
    assert safe_json_parse(None) is None


def test_safe_json_parse_logs_failure(caplog):
    with caplog.at_level("WARNING"):
        safe_json_parse("{broken")
    assert "JSON parse error" in caplog.text
