"""
Business Assistant for ExpenseMan

DESIGN DECISION: The assistant only ever sees the published Snapshot.
It does not fetch anything and cannot change anything:
1. build_business_context() turns a Snapshot into a JSON document
2. generate_response() sends that document plus the conversation to Gemini

BOUNDARIES:
- CAN: Summarise, compare and explain the figures it is given
- CANNOT: Modify entities or trigger a sync
- MUST: Say so when the data does not contain the answer

The LLM is a READER of the dashboard, not a source of numbers.
"""

import json
from typing import Literal, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel

from expenseman.config import get_settings
from expenseman.models.entities import Snapshot


logger = structlog.get_logger(__name__)

RECENT_LIMIT = 10

SETUP_MESSAGE = (
    "The AI assistant is not configured. Set GEMINI_API_KEY in your "
    "environment or .env file to enable it."
)

GREETING = (
    "Hello! I'm your AI assistant for ExpenseMan. I can help you analyze your "
    "business data, answer questions about your finances, and provide insights. "
    "What would you like to know?"
)

SYSTEM_PROMPT = """You are an expert AI assistant for a small construction business's \
management dashboard (ExpenseMan).

You answer questions using ONLY the business data supplied with each question:
payments received, expenses, sites, labour, clients and per-operator balances.
Amounts are in Indian Rupees.

Rules:
- Never invent figures. If the data does not contain the answer, say so.
- Show the numbers you used when you calculate totals or differences.
- Keep answers short and practical."""


class ChatMessage(BaseModel):
    """One turn of the conversation."""
    role: Literal["user", "model"]
    content: str


def _sum(items) -> float:
    return sum(item.amount for item in items)


def build_business_context(snapshot: Snapshot) -> str:
    """
    Serialise the parts of a Snapshot the assistant needs as JSON.

    Only the last few payments/expenses are included; totals are
    computed over everything.
    """
    total_payments = _sum(snapshot.payments)
    total_expenses = _sum(snapshot.expenses)

    expenses_by_category: dict[str, float] = {}
    for expense in snapshot.expenses:
        expenses_by_category[expense.category] = (
            expenses_by_category.get(expense.category, 0.0) + expense.amount
        )

    context = {
        "summary": {
            "total_payments": total_payments,
            "total_expenses": total_expenses,
            "profit": total_payments - total_expenses,
            "active_sites": len(snapshot.sites),
            "total_labour": len(snapshot.labours),
            "total_clients": len(snapshot.clients),
            "recent_transactions": len(snapshot.payments) + len(snapshot.expenses),
        },
        "payments": [p.model_dump(mode="json") for p in snapshot.payments[-RECENT_LIMIT:]],
        "expenses": [e.model_dump(mode="json") for e in snapshot.expenses[-RECENT_LIMIT:]],
        "sites": [s.model_dump(mode="json") for s in snapshot.sites],
        "labours": [labour.model_dump(mode="json") for labour in snapshot.labours],
        "clients": [c.model_dump(mode="json") for c in snapshot.clients],
        "expenses_by_category": expenses_by_category,
        "user_balances": [b.model_dump(mode="json") for b in snapshot.user_balances],
    }
    return json.dumps(context, indent=2, ensure_ascii=False)


def _friendly_error(error: Exception) -> str:
    """Map a Gemini failure to something the user can act on."""
    text = str(error).lower()
    if "api key" in text or "api_key" in text:
        return (
            "Invalid API key. Please check GEMINI_API_KEY and make sure it has "
            "access to the Gemini API."
        )
    if "quota" in text or "limit" in text:
        return "API quota exceeded. Please try again later."
    if "permission" in text:
        return "Permission denied. Please make sure your API key can use the Gemini API."
    if "not found" in text or "not supported" in text:
        return "The AI model is currently unavailable. Please check the configured model name."
    return "Sorry, I encountered an error while processing your request. Please try again."


class BusinessAssistant:
    """
    Chat assistant over the current business snapshot.

    FLOW:
    1. Caller builds the context with build_business_context(state.snapshot)
    2. Earlier turns become Gemini chat history
    3. The latest user turn is wrapped together with the context
    """

    def __init__(self, api_key: Optional[str] = None):
        self._settings = get_settings().gemini
        self._api_key = api_key if api_key is not None else self._settings.api_key
        self._model = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _configure_genai(self):
        """Configure Google Generative AI on first use."""
        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
            system_instruction=SYSTEM_PROMPT,
        )
        return self._model

    @staticmethod
    def _build_contents(history: list[ChatMessage], context: Optional[str]) -> list[dict]:
        # The greeting is UI chrome, not part of the conversation
        turns = [m for m in history if not (m.role == "model" and m.content == GREETING)]
        latest = turns[-1]

        prompt = latest.content
        if context:
            prompt = (
                "Answer the question using the business data below.\n\n"
                f"DATA:\n```json\n{context}\n```\n\n"
                f'USER QUESTION:\n"{latest.content}"'
            )

        contents = [
            {"role": message.role, "parts": [message.content]}
            for message in turns[:-1]
        ]
        contents.append({"role": "user", "parts": [prompt]})
        return contents

    async def generate_response(
        self,
        history: list[ChatMessage],
        context: Optional[str] = None,
    ) -> str:
        """
        Reply to the last user message in ``history``.

        Returns a setup message when no API key is configured, and a
        user-facing error message (never an exception) when Gemini fails.
        """
        if not self.is_configured:
            return SETUP_MESSAGE
        if not history or history[-1].role != "user":
            raise ValueError("history must end with a user message")

        model = self._model or self._configure_genai()
        contents = self._build_contents(history, context)

        try:
            response = await model.generate_content_async(contents)
            return response.text.strip()
        except Exception as e:
            logger.error(
                "assistant_request_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            return _friendly_error(e)
