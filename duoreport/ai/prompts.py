"""DuoReport — Chat Prompt Construction."""

import json
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from duoreport.ai.base_provider import ChatTurn
from duoreport.core.metric_registry import column_glossary
from duoreport.models.metrics_models import Platform

SYSTEM_PROMPT = """You are an expert-level Paid Social Media strategist. Your primary goal is to provide actionable insights and data-driven recommendations based on the provided marketing campaign data for Facebook (fb_ columns) and TikTok (tt_ columns).
Current date: {current_date}. All monetary values are in {currency}.

Core Responsibilities:
1. Critical Data Analysis: Analyze trends, compare performance, identify anomalies, and highlight key performance indicators (KPIs) from the data provided.
2. Strategic Recommendations: Provide specific, actionable recommendations (e.g., budget reallocation, A/B testing suggestions, creative optimizations) based strictly on the data shown.
3. Professional Terminology: Use clear, industry-standard language (e.g., CPA, CTR, ROAS, funnel analysis, campaign optimization).
4. Funnel Awareness: Interpret metrics in the context of a marketing funnel (awareness, consideration, conversion) if the data supports it.
5. Clarification and Probing: If a user's question is vague in relation to the provided data, ask clarifying questions to provide the most relevant advice.
6. Data Limitations: If the provided data is insufficient to answer a question or make a specific recommendation, clearly state this. Do not invent data or make assumptions beyond what is given.
7. Conciseness and Clarity: Present your analysis and recommendations clearly and concisely.

Columns:
{glossary}

Days where every value for a platform is 0 mean that platform reported nothing for that day (no delivery, or the platform was unavailable).
Focus your analysis and recommendations exclusively on the provided data.
"""

NO_DATA_CONTEXT = (
    "(No specific marketing data was provided for this query. "
    "Please respond based on general knowledge or ask for data if needed.)"
)


def build_system_prompt(currency: str, now: Optional[datetime] = None) -> str:
    """System instruction stamped with today's date."""
    current = (now or datetime.now(timezone.utc)).strftime("%B %d, %Y")
    glossary = "\n".join(column_glossary([p.prefix for p in Platform], currency))
    return SYSTEM_PROMPT.format(current_date=current, currency=currency, glossary=glossary)


def build_user_prompt(question: str, marketing_data: List[dict]) -> str:
    """The data context followed by the user's question."""
    if marketing_data:
        # Newest first: the last row is the oldest day
        first_date = marketing_data[-1].get("date", "N/A")
        last_date = marketing_data[0].get("date", "N/A")
        context = (
            f"Here is the marketing data for the period from {first_date} to {last_date}. "
            f"Please base your analysis on this entire dataset:\n"
            f"{json.dumps(marketing_data, indent=2)}\n\n"
        )
    else:
        context = NO_DATA_CONTEXT
    return f"{context}User's Question: {question}"


def clean_history(history: Iterable[object], limit: int) -> List[ChatTurn]:
    """Keep real, completed user/ai messages; map them to chat roles.

    Entries that are not objects, have blank text, an unknown sender, or
    are still loading are dropped. At most `limit` recent turns are kept.
    """
    roles = {"user": "user", "ai": "assistant", "model": "assistant", "assistant": "assistant"}
    turns: List[ChatTurn] = []
    for entry in history:
        if not isinstance(entry, dict):
            continue
        text = entry.get("text")
        sender = entry.get("sender")
        if entry.get("is_loading") or entry.get("isLoading"):
            continue
        if not isinstance(text, str) or not text.strip() or sender not in roles:
            continue
        turns.append(ChatTurn(role=roles[sender], content=text))
    if limit <= 0:
        return []
    return turns[-limit:]


def alternate_turns(history: Iterable[ChatTurn]) -> List[ChatTurn]:
    """Start with a user turn and merge consecutive turns from the same role."""
    turns: List[ChatTurn] = []
    for turn in history:
        if not turns and turn.role != "user":
            continue
        if turns and turns[-1].role == turn.role:
            merged = f"{turns[-1].content}\n\n{turn.content}"
            turns[-1] = ChatTurn(role=turn.role, content=merged)
        else:
            turns.append(turn)
    # The new question is a user turn, so history must end on the assistant
    if turns and turns[-1].role == "user":
        turns.pop()
    return turns


def build_messages(
    question: str, marketing_data: List[dict], history: List[ChatTurn]
) -> List[dict]:
    """Provider-agnostic message list: prior turns then the new question."""
    messages = [
        {"role": turn.role, "content": turn.content} for turn in alternate_turns(history)
    ]
    messages.append(
        {"role": "user", "content": build_user_prompt(question, marketing_data)}
    )
    return messages
