"""
Provider slots and the rules that pick one for AI Gateway routing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple


AI_GATEWAY_API_KEY = "AI_GATEWAY_API_KEY"
AI_GATEWAY_BASE_URL = "AI_GATEWAY_BASE_URL"
AI_GATEWAY_PROVIDER = "AI_GATEWAY_PROVIDER"


class ProviderSlot(str, Enum):
    """Upstream model providers the container knows how to call."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"

    @property
    def api_key_var(self) -> str:
        return f"{self.name}_API_KEY"

    @property
    def base_url_var(self) -> str:
        return f"{self.name}_BASE_URL"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ProviderSlot"]:
        """Exact, case-sensitive lookup; anything else is ``None``."""
        for slot in cls:
            if slot.value == value:
                return slot
        return None


def strip_trailing_slashes(url: str) -> str:
    return url.rstrip("/")


@dataclass(frozen=True)
class SlotRule:
    """One step of slot selection: when ``applies`` holds, ``choose`` names the slot."""
    name: str
    applies: Callable[[Mapping[str, str]], bool]
    choose: Callable[[Mapping[str, str]], ProviderSlot]


def _override_slot(inputs: Mapping[str, str]) -> Optional[ProviderSlot]:
    return ProviderSlot.parse(inputs.get(AI_GATEWAY_PROVIDER))


def _url_suffix_slot(inputs: Mapping[str, str]) -> Optional[ProviderSlot]:
    base_url = strip_trailing_slashes(inputs.get(AI_GATEWAY_BASE_URL) or "")
    for slot in ProviderSlot:
        if base_url.endswith(f"/{slot.value}"):
            return slot
    return None


# Evaluated in order, first match wins
SLOT_RULES: Tuple[SlotRule, ...] = (
    SlotRule(
        name="provider-override",
        applies=lambda inputs: _override_slot(inputs) is not None,
        choose=lambda inputs: _override_slot(inputs),
    ),
    SlotRule(
        name="base-url-suffix",
        applies=lambda inputs: _url_suffix_slot(inputs) is not None,
        choose=lambda inputs: _url_suffix_slot(inputs),
    ),
)


def select_provider_slot(
    inputs: Mapping[str, str],
    rules: Tuple[SlotRule, ...] = SLOT_RULES,
) -> Optional[ProviderSlot]:
    """Return the slot gateway credentials should fill, or ``None`` when no rule matches."""
    for rule in rules:
        if rule.applies(inputs):
            return rule.choose(inputs)
    return None
