"""DuoReport — AI Chat Routes."""

from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from duoreport.ai.base_provider import AIProvider
from duoreport.ai.prompts import clean_history
from duoreport.api.deps import get_providers, get_settings
from duoreport.config import Settings
from duoreport.core.logging import get_logger

logger = get_logger("api.chat")

router = APIRouter(prefix="/api", tags=["AI"])


# ── Request / Response Models ──


class AskRequest(BaseModel):
    """Request body for POST /api/ask."""

    user_query: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_query", "userQuery")
    )
    marketing_data: Any = Field(
        default=None, validation_alias=AliasChoices("marketing_data", "marketingData")
    )
    history: List[Any] = []
    provider: str = "auto"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_query": "Which platform had the better CPA last week?",
                    "marketing_data": [{"date": "2024-03-30", "fb_cpa": 4.2, "tt_cpa": 6.1}],
                    "history": [{"sender": "user", "text": "Hi"}],
                }
            ]
        }
    }


class AskResponse(BaseModel):
    """Response for POST /api/ask."""

    status: str
    provider_used: str
    reply: str


# ── Shared Helpers ──


def _select_provider(
    provider_name: str,
    providers: Dict[str, AIProvider],
    default: str,
) -> Tuple[str, AIProvider]:
    """Select and return an available AI provider.

    When provider_name is 'auto', tries the configured default first,
    then falls through remaining providers.
    """
    if provider_name == "auto":
        order = [default] + [name for name in providers if name != default]
        for name in order:
            provider = providers.get(name)
            if provider is not None and provider.is_available():
                return name, provider
        raise HTTPException(
            status_code=503,
            detail="AI service is not configured. Set ANTHROPIC_API_KEY, OPENAI_API_KEY, or SARVAM_API_KEY in .env.",
        )
    elif provider_name in providers:
        provider = providers[provider_name]
        if not provider.is_available():
            raise HTTPException(
                status_code=503,
                detail=f"{provider_name} provider not configured.",
            )
        return provider_name, provider
    else:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown provider: {provider_name}.",
        )


def _failure_status(error: Exception) -> Tuple[int, str]:
    """Map a provider exception onto an HTTP status and user-facing message.

    SDK status errors (anthropic, openai) carry ``status_code`` and are
    mapped on it; their raw body is never echoed. Anything else falls back
    to matching the error text.
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code in (401, 403):
            return 401, "AI service authentication failed: Invalid API key."
        if status_code == 429:
            return 429, "AI service quota exceeded. Please try again later."
        return 500, "An error occurred while communicating with the AI model."

    message = str(error) or "An error occurred while communicating with the AI model."
    lowered = message.lower()
    if "api key" in lowered or "api_key" in lowered:
        return 401, "AI service authentication failed: Invalid API key."
    if "quota" in lowered or "rate limit" in lowered:
        return 429, "AI service quota exceeded. Please try again later."
    if "invalid response format" in lowered:
        return 500, "The AI model returned an unexpected response. Please try again."
    return 500, message


# ── Endpoints ──


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    config: Settings = Depends(get_settings),
    providers: Dict[str, AIProvider] = Depends(get_providers),
):
    """Answer a question about the reconciled table with the AI assistant."""
    if not request.user_query or not request.user_query.strip():
        raise HTTPException(
            status_code=400,
            detail="Invalid or missing 'user_query' in the request body.",
        )
    if not isinstance(request.marketing_data, list):
        raise HTTPException(
            status_code=400,
            detail="Invalid or missing 'marketing_data' array in the request body.",
        )

    provider_name, provider = _select_provider(
        request.provider, providers, config.default_ai_provider
    )
    rows = [row for row in request.marketing_data if isinstance(row, dict)]
    history = clean_history(request.history, config.chat_history_limit)

    try:
        reply = await provider.reply(request.user_query, rows, history)
    except Exception as e:
        status_code, message = _failure_status(e)
        logger.error(f"AI chat failed via {provider_name}: {e}")
        raise HTTPException(status_code=status_code, detail=message)

    return AskResponse(status="success", provider_used=provider_name, reply=reply)
