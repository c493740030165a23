"""
Unit tests for provider slot selection rules.
"""

import pytest

from service_gateway.app.environment.providers import (
    SLOT_RULES,
    ProviderSlot,
    SlotRule,
    select_provider_slot,
)


class TestProviderSlot:
    """Test cases for ProviderSlot."""

    def test_variable_names(self):
        assert ProviderSlot.ANTHROPIC.api_key_var == "ANTHROPIC_API_KEY"
        assert ProviderSlot.ANTHROPIC.base_url_var == "ANTHROPIC_BASE_URL"
        assert ProviderSlot.OPENAI.api_key_var == "OPENAI_API_KEY"
        assert ProviderSlot.OPENAI.base_url_var == "OPENAI_BASE_URL"

    @pytest.mark.parametrize("value,expected", [
        ("anthropic", ProviderSlot.ANTHROPIC),
        ("openai", ProviderSlot.OPENAI),
        ("OpenAI", None),
        (" openai", None),
        ("", None),
        (None, None),
        ("workers-ai", None),
    ])
    def test_parse_is_exact(self, value, expected):
        assert ProviderSlot.parse(value) is expected


class TestSlotRules:
    """Each rule on its own, then the ordered chain."""

    def test_rules_are_ordered_override_first(self):
        assert [rule.name for rule in SLOT_RULES] == ["provider-override", "base-url-suffix"]

    def test_override_rule(self):
        rule = SLOT_RULES[0]
        inputs = {"AI_GATEWAY_PROVIDER": "anthropic"}

        assert rule.applies(inputs)
        assert rule.choose(inputs) is ProviderSlot.ANTHROPIC
        assert not rule.applies({"AI_GATEWAY_PROVIDER": "bogus"})
        assert not rule.applies({})

    @pytest.mark.parametrize("url,expected", [
        ("https://gateway.example.com/openai", ProviderSlot.OPENAI),
        ("https://gateway.example.com/openai///", ProviderSlot.OPENAI),
        ("https://gateway.example.com/anthropic/", ProviderSlot.ANTHROPIC),
        ("https://gateway.example.com/v1", None),
        ("https://gateway.example.com/myopenai", None),
        ("https://gateway.example.com/openai/v1", None),
        ("openai", None),
    ])
    def test_suffix_rule(self, url, expected):
        rule = SLOT_RULES[1]
        inputs = {"AI_GATEWAY_BASE_URL": url}

        if expected is None:
            assert not rule.applies(inputs)
        else:
            assert rule.applies(inputs)
            assert rule.choose(inputs) is expected

    def test_override_wins_over_suffix(self):
        inputs = {
            "AI_GATEWAY_PROVIDER": "openai",
            "AI_GATEWAY_BASE_URL": "https://gateway.example.com/anthropic",
        }
        assert select_provider_slot(inputs) is ProviderSlot.OPENAI

    def test_invalid_override_falls_through_to_suffix(self):
        inputs = {
            "AI_GATEWAY_PROVIDER": "invalid",
            "AI_GATEWAY_BASE_URL": "https://gateway.example.com/openai",
        }
        assert select_provider_slot(inputs) is ProviderSlot.OPENAI

    def test_no_rule_matches(self):
        assert select_provider_slot({"AI_GATEWAY_BASE_URL": "https://gateway.example.com/"}) is None
        assert select_provider_slot({}) is None

    def test_custom_rule_chain(self):
        always_openai = SlotRule(
            name="always-openai",
            applies=lambda inputs: True,
            choose=lambda inputs: ProviderSlot.OPENAI,
        )
        inputs = {"AI_GATEWAY_PROVIDER": "anthropic"}

        assert select_provider_slot(inputs, rules=(always_openai,) + SLOT_RULES) is ProviderSlot.OPENAI
        assert select_provider_slot(inputs, rules=()) is None
