"""Tests for tolerant rule config parsing."""

from helpdesk.domain.value_objects.rule_config import RuleConfig, parse_config


def test_parse_config_accepts_mapping():
    assert parse_config({"overflow": False}) == {"overflow": False}


def test_parse_config_accepts_json_text():
    assert parse_config('{"department": "Billing"}') == {"department": "Billing"}


def test_parse_config_malformed_json_is_empty():
    assert parse_config("{not json") == {}


def test_parse_config_non_object_is_empty():
    assert parse_config("[1, 2]") == {}
    assert parse_config(42) == {}


def test_parse_config_empty_values():
    assert parse_config(None) == {}
    assert parse_config("") == {}


def test_get_int():
    config = RuleConfig({"cap": 5, "text_cap": "7", "bad": "lots", "flag": True})
    assert config.get_int("cap") == 5
    assert config.get_int("text_cap") == 7
    assert config.get_int("bad", 3) == 3
    assert config.get_int("flag") is None
    assert config.get_int("missing") is None


def test_get_bool():
    config = RuleConfig({"a": False, "b": "true", "c": "off", "d": 0, "e": "maybe"})
    assert config.get_bool("a", True) is False
    assert config.get_bool("b", False) is True
    assert config.get_bool("c", True) is False
    assert config.get_bool("d", True) is False
    assert config.get_bool("e", True) is True
    assert config.get_bool("missing", True) is True


def test_get_str_ignores_blank_and_non_strings():
    config = RuleConfig({"department": "  Billing ", "blank": "  ", "number": 3})
    assert config.get_str("department") == "Billing"
    assert config.get_str("blank") is None
    assert config.get_str("number") is None
