"""DuoReport — Sarvam AI Provider."""

from typing import List

from sarvamai import AsyncSarvamAI

from duoreport.ai.base_provider import AIProvider, ChatTurn
from duoreport.ai.prompts import build_messages, build_system_prompt
from duoreport.config import Settings
from duoreport.core.logging import get_logger

logger = get_logger("ai.sarvam")


class SarvamProvider(AIProvider):
    """Sarvam AI provider for the chat assistant (model: sarvam-m)."""

    name = "sarvam"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = (
            AsyncSarvamAI(api_subscription_key=settings.sarvam_api_key)
            if settings.sarvam_api_key
            else None
        )

    def is_available(self) -> bool:
        return self.client is not None and bool(self.settings.sarvam_api_key)

    async def reply(
        self,
        question: str,
        marketing_data: List[dict],
        history: List[ChatTurn],
    ) -> str:
        if not self.is_available():
            raise RuntimeError("Sarvam provider not configured")

        messages = [
            {"role": "system", "content": build_system_prompt(self.settings.report_currency)},
            *build_messages(question, marketing_data, history),
        ]
        try:
            response = await self.client.chat.completions(
                messages=messages,
                temperature=0.5,
                max_tokens=1500,
            )
        except Exception as e:
            logger.error(f"Sarvam generation failed: {e}")
            raise

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("AI model returned an invalid response format.")
        return content
