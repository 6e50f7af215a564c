"""DuoReport — Abstract AI Provider."""

from abc import ABC, abstractmethod
from typing import List, Literal

from pydantic import BaseModel


class ChatTurn(BaseModel):
    """One prior message of the conversation, already validated."""

    role: Literal["user", "assistant"]
    content: str


class AIProvider(ABC):
    """Abstract base for the marketing-data chat assistant.

    Providers receive the reconciled table, the user's question and the
    prior conversation, and return a single free-text reply. The reply is
    passed back to the caller verbatim.
    """

    name: str = ""

    @abstractmethod
    async def reply(
        self,
        question: str,
        marketing_data: List[dict],
        history: List[ChatTurn],
    ) -> str:
        """Answer `question` about `marketing_data`.

        Args:
            question: The user's free-text question.
            marketing_data: Flat daily records, newest first.
            history: Prior turns, oldest first, without loading placeholders.

        Returns:
            The model's reply text.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is configured and ready."""
        ...
