"""
AI Capability Interface

DESIGN DECISION: The tracker talks to generative AI through this
interface only. The Gemini implementation is injected at startup and
tests inject a fake, so nothing in the tracker needs the network.

BOUNDARIES:
- CAN: Summarize, analyze and chat about expense data it is handed
- CAN: Generate and edit images
- CANNOT: Read or write the ledger, budgets or categories
- Every call is a single request/response; no retries
"""

from abc import ABC, abstractmethod
from typing import Any

from expense_tracker.models import ChatMessage


class AIServiceInterface(ABC):
    """The five generative-AI operations the app offers."""

    @abstractmethod
    async def summarize(self, expense_records: list[dict[str, Any]]) -> str:
        """
        Brief summary of spending habits.

        Args:
            expense_records: Expenses as plain dicts, without ids
        """
        pass

    @abstractmethod
    async def analyze(
        self,
        expenses_json: str,
        question: str,
        use_detailed_model: bool,
    ) -> str:
        """
        Answer a free-text question about the expense data.

        Args:
            expenses_json: Full expense records as JSON text
            question: The user's question
            use_detailed_model: Use the slower, more thorough model
        """
        pass

    @abstractmethod
    async def chat(self, history: list[ChatMessage], message: str) -> str:
        """Reply to a new chat message given the earlier conversation."""
        pass

    @abstractmethod
    async def generate_image(self, prompt: str) -> str:
        """Generate an image. Returns a data: URI."""
        pass

    @abstractmethod
    async def edit_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        """Edit an image according to the prompt. Returns a data: URI."""
        pass


class AIServiceError(Exception):
    """Base exception for AI service errors."""
    pass


class NoImageReturnedError(AIServiceError):
    """The model answered but sent no image data."""
    pass
