"""DuoReport — Anthropic Claude Provider."""

from typing import List

from anthropic import AsyncAnthropic

from duoreport.ai.base_provider import AIProvider, ChatTurn
from duoreport.ai.prompts import build_messages, build_system_prompt
from duoreport.config import Settings
from duoreport.core.logging import get_logger

logger = get_logger("ai.claude")

CLAUDE_MODEL = "claude-sonnet-4-20250514"


class ClaudeProvider(AIProvider):
    """Anthropic Claude provider for the chat assistant."""

    name = "claude"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = (
            AsyncAnthropic(api_key=settings.anthropic_api_key)
            if settings.anthropic_api_key
            else None
        )

    def is_available(self) -> bool:
        return self.client is not None and bool(self.settings.anthropic_api_key)

    async def reply(
        self,
        question: str,
        marketing_data: List[dict],
        history: List[ChatTurn],
    ) -> str:
        if not self.is_available():
            raise RuntimeError("Claude provider not configured")

        try:
            response = await self.client.messages.create(
                model=CLAUDE_MODEL,
                max_tokens=1500,
                system=build_system_prompt(self.settings.report_currency),
                messages=build_messages(question, marketing_data, history),
            )
        except Exception as e:
            logger.error(f"Claude generation failed: {e}")
            raise

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text:
            raise RuntimeError("AI model returned an invalid response format.")
        return text
