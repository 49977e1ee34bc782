"""Tests for ManageRulesUseCase."""

import pytest

from helpdesk.application.errors import InvalidRuleError, RuleNotFoundError
from helpdesk.application.use_cases.manage_rules import ManageRulesUseCase
from routing_fakes import FakeRuleRepo


@pytest.fixture
def uc():
    return ManageRulesUseCase(FakeRuleRepo())


@pytest.mark.asyncio
async def test_create_and_list_in_priority_order(uc):
    await uc.create_rule("Fallback", "load_based", priority=10)
    await uc.create_rule("Billing desk", "department_match", priority=1,
                         config={"department": "Billing"})

    rules = await uc.list_rules()
    assert [r.name for r in rules] == ["Billing desk", "Fallback"]
    assert rules[0].config == {"department": "Billing"}


@pytest.mark.asyncio
async def test_create_rejects_unknown_rule_type(uc):
    with pytest.raises(InvalidRuleError):
        await uc.create_rule("Odd", "priority_based")


@pytest.mark.asyncio
async def test_create_direct_assignment_and_manual_rules(uc):
    direct = await uc.create_rule(
        "VIP desk",
        "direct_assignment",
        config={
            "conditions": [{"field": "customerEmail", "operator": "endsWith", "value": "@vip.example"}],
            "assign_to": 4,
        },
    )
    manual = await uc.create_rule("Hold everything", "manual", priority=-1)

    assert direct.rule_type == "direct_assignment"
    assert direct.config["assign_to"] == 4
    assert manual.rule_type == "manual"
    assert [r.name for r in await uc.list_rules()] == ["Hold everything", "VIP desk"]


@pytest.mark.asyncio
async def test_create_rejects_blank_name(uc):
    with pytest.raises(InvalidRuleError):
        await uc.create_rule("  ", "load_based")


@pytest.mark.asyncio
async def test_malformed_config_text_stored_as_empty(uc):
    rule = await uc.create_rule("RR", "round_robin", config="{oops")
    assert rule.config == {}


@pytest.mark.asyncio
async def test_config_json_text_is_parsed(uc):
    rule = await uc.create_rule("Skills", "skill_match", config='{"skill": "Refunds"}')
    assert rule.config == {"skill": "Refunds"}


@pytest.mark.asyncio
async def test_partial_update(uc):
    rule = await uc.create_rule("RR", "round_robin", priority=3)
    updated = await uc.update_rule(rule.id, {"enabled": False, "priority": 7, "ignored": 1})

    assert updated.enabled is False
    assert updated.priority == 7
    assert updated.name == "RR"
    assert updated.rule_type == "round_robin"


@pytest.mark.asyncio
async def test_update_validates_rule_type(uc):
    rule = await uc.create_rule("RR", "round_robin")
    with pytest.raises(InvalidRuleError):
        await uc.update_rule(rule.id, {"rule_type": "random"})


@pytest.mark.asyncio
async def test_update_missing_rule(uc):
    with pytest.raises(RuleNotFoundError):
        await uc.update_rule(99, {"enabled": False})


@pytest.mark.asyncio
async def test_delete(uc):
    rule = await uc.create_rule("RR", "round_robin")
    await uc.delete_rule(rule.id)

    with pytest.raises(RuleNotFoundError):
        await uc.get_rule(rule.id)
    with pytest.raises(RuleNotFoundError):
        await uc.delete_rule(rule.id)
