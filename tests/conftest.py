"""Pytest configuration and shared fixtures."""

import pytest

from routing_fakes import make_agent


@pytest.fixture
def scenario_roster():
    """A (load 2), B (load 0), C (load 5), no caps."""
    return [
        make_agent(1, load=2, name="A"),
        make_agent(2, load=0, name="B"),
        make_agent(3, load=5, name="C"),
    ]
