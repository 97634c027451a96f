"""AI Agents package."""

from expenseman.agents.assistant import (
    GREETING,
    SETUP_MESSAGE,
    BusinessAssistant,
    ChatMessage,
    build_business_context,
)

__all__ = [
    "GREETING",
    "SETUP_MESSAGE",
    "BusinessAssistant",
    "ChatMessage",
    "build_business_context",
]
