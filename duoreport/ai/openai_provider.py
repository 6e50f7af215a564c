"""DuoReport — OpenAI Provider."""

from typing import List

from openai import AsyncOpenAI

from duoreport.ai.base_provider import AIProvider, ChatTurn
from duoreport.ai.prompts import build_messages, build_system_prompt
from duoreport.config import Settings
from duoreport.core.logging import get_logger

logger = get_logger("ai.openai")

OPENAI_MODEL = "gpt-4o-mini"


class OpenAIProvider(AIProvider):
    """OpenAI chat-completions provider for the chat assistant."""

    name = "openai"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = (
            AsyncOpenAI(api_key=settings.openai_api_key)
            if settings.openai_api_key
            else None
        )

    def is_available(self) -> bool:
        return self.client is not None and bool(self.settings.openai_api_key)

    async def reply(
        self,
        question: str,
        marketing_data: List[dict],
        history: List[ChatTurn],
    ) -> str:
        if not self.is_available():
            raise RuntimeError("OpenAI provider not configured")

        messages = [
            {"role": "system", "content": build_system_prompt(self.settings.report_currency)},
            *build_messages(question, marketing_data, history),
        ]
        try:
            response = await self.client.chat.completions.create(
                model=OPENAI_MODEL,
                messages=messages,
                temperature=0.5,
                max_tokens=1500,
            )
        except Exception as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("AI model returned an invalid response format.")
        return content
