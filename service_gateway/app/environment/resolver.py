"""
Builds the environment handed to the moltbot container.

Worker inputs overlap: provider keys can be set directly or routed through
Cloudflare AI Gateway, and a few variables are renamed for the container.
Empty strings count as unset, and nothing is ever defaulted.
"""

from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from shared.logging import get_logger
from .providers import (
    AI_GATEWAY_API_KEY,
    AI_GATEWAY_BASE_URL,
    ProviderSlot,
    select_provider_slot,
    strip_trailing_slashes,
)


logger = get_logger("gateway.environment")

# Copied under the same name
PASSTHROUGH_VARS: Tuple[str, ...] = (
    "AI_GATEWAY_PROVIDER",
    "AI_GATEWAY_MODEL",
    "AI_GATEWAY_API_FORMAT",
    "CLAWDBOT_BIND_MODE",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_DM_POLICY",
    "DISCORD_BOT_TOKEN",
    "DISCORD_DM_POLICY",
    "SLACK_BOT_TOKEN",
    "SLACK_APP_TOKEN",
)

# Container name -> worker names, first non-empty wins. The container name is
# accepted last so a resolved environment resolves to itself.
RENAMED_VARS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("CLAWDBOT_GATEWAY_TOKEN", ("MOLTBOT_GATEWAY_TOKEN", "CLAWDBOT_GATEWAY_TOKEN")),
    ("CLAWDBOT_DEV_MODE", ("DEV_MODE", "CLAWDBOT_DEV_MODE")),
)


def _value(inputs: Mapping[str, str], name: str) -> Optional[str]:
    value = inputs.get(name)
    return value if value else None


def _looks_like_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        # e.g. an unbalanced IPv6 bracket
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def normalized_gateway_url(inputs: Mapping[str, str]) -> Optional[str]:
    """AI Gateway base URL without trailing slashes, or ``None`` when unset."""
    raw = _value(inputs, AI_GATEWAY_BASE_URL)
    if raw is None:
        return None

    if not _looks_like_url(raw):
        logger.warning("AI_GATEWAY_BASE_URL is not a valid URL, passing it through", value=raw)

    return strip_trailing_slashes(raw) or None


def gateway_slot(inputs: Mapping[str, str]) -> Optional[ProviderSlot]:
    """Slot claimed by AI Gateway routing, if routing is active and a slot is recognised."""
    if _value(inputs, AI_GATEWAY_API_KEY) is None:
        return None
    return select_provider_slot(inputs)


def resolve_environment(inputs: Mapping[str, str]) -> Dict[str, str]:
    """Resolve worker inputs into the container's environment variables."""
    resolved: Dict[str, str] = {}

    base_url = normalized_gateway_url(inputs)
    slot = gateway_slot(inputs)

    if slot is not None:
        # Gateway routing replaces direct credentials for every provider
        resolved[slot.api_key_var] = inputs[AI_GATEWAY_API_KEY]
        if base_url is not None:
            resolved[slot.base_url_var] = base_url
    else:
        for provider in ProviderSlot:
            for name in (provider.api_key_var, provider.base_url_var):
                value = _value(inputs, name)
                if value is not None:
                    resolved[name] = value

    if base_url is not None:
        resolved[AI_GATEWAY_BASE_URL] = base_url

    for name in PASSTHROUGH_VARS:
        value = _value(inputs, name)
        if value is not None:
            resolved[name] = value

    for target, sources in RENAMED_VARS:
        for source in sources:
            value = _value(inputs, source)
            if value is not None:
                resolved[target] = value
                break

    return resolved
