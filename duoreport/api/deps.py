"""DuoReport — Route Dependencies.

Settings are loaded once per process; sources, reconciler and AI providers
are built per request from them. Tests swap any of these through
`app.dependency_overrides`.
"""

from typing import Dict

from fastapi import Depends

from duoreport.ai.base_provider import AIProvider
from duoreport.ai.claude_provider import ClaudeProvider
from duoreport.ai.openai_provider import OpenAIProvider
from duoreport.ai.sarvam_provider import SarvamProvider
from duoreport.analyzer.reconciler import Reconciler
from duoreport.config import Settings, settings
from duoreport.connectors.meta.source import MetaSource
from duoreport.connectors.tiktok.source import TikTokSource


def get_settings() -> Settings:
    return settings


def get_reconciler(config: Settings = Depends(get_settings)) -> Reconciler:
    return Reconciler(
        MetaSource(config),
        TikTokSource(config),
        allowed_lookbacks=config.allowed_lookback_days,
    )


def get_providers(config: Settings = Depends(get_settings)) -> Dict[str, AIProvider]:
    """All known AI providers, keyed by name, in fallback order."""
    return {
        "claude": ClaudeProvider(config),
        "openai": OpenAIProvider(config),
        "sarvam": SarvamProvider(config),
    }
