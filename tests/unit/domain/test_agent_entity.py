"""Tests for the Agent entity and skills parsing."""

from helpdesk.domain.entities.agent import Agent, parse_presence, parse_skills
from helpdesk.domain.value_objects.enums import PresenceStatus


def test_parse_skills_from_list():
    assert parse_skills(["Billing", " Technical ", ""]) == {"Billing", "Technical"}


def test_parse_skills_from_json_array():
    assert parse_skills('["Billing", "Technical"]') == {"Billing", "Technical"}


def test_parse_skills_from_separated_text():
    assert parse_skills("Billing, Technical;Support") == {"Billing", "Technical", "Support"}


def test_parse_skills_malformed_json_is_empty():
    assert parse_skills('["Billing",') == set()


def test_parse_skills_unsupported_type_is_empty():
    assert parse_skills(12) == set()
    assert parse_skills(None) == set()


def test_capacity_unbounded_without_caps():
    agent = Agent(id=1, name="A", current_load=100)
    assert agent.is_under_capacity() is True


def test_own_cap_beats_default():
    agent = Agent(id=1, name="A", max_load=3, current_load=3)
    assert agent.is_under_capacity(default_max_load=10) is False
    assert Agent(id=2, name="B", current_load=3).is_under_capacity(default_max_load=10) is True


def test_parse_presence_known_values():
    assert parse_presence("online") == PresenceStatus.ONLINE
    assert parse_presence(" Away ") == PresenceStatus.AWAY


def test_parse_presence_unknown_is_offline():
    assert parse_presence("busy") == PresenceStatus.OFFLINE
    assert parse_presence(None) == PresenceStatus.OFFLINE
