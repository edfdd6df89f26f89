"""AI Agents package."""

from expense_tracker.agents.interface import (
    AIServiceError,
    AIServiceInterface,
    NoImageReturnedError,
)
from expense_tracker.agents.gemini import (
    GeminiAIService,
    from_data_uri,
    to_data_uri,
    to_gemini_history,
)

__all__ = [
    "AIServiceError",
    "AIServiceInterface",
    "GeminiAIService",
    "NoImageReturnedError",
    "from_data_uri",
    "to_data_uri",
    "to_gemini_history",
]
