"""
Shared fixtures.

No test touches the network or the real data directory: storage is
in-memory (or under tmp_path) and the AI service is a fake.
"""

import os
from datetime import date

import pytest

from expense_tracker.agents import AIServiceInterface, AIServiceError
from expense_tracker.config import get_settings
from expense_tracker.services.storage import InMemoryStore
from expense_tracker.state import ExpenseStateManager


APP_SETTINGS_ENV = {
    "PRESET_CATEGORIES", "ALLOW_PRESET_RENAME", "MIN_EXPENSES_FOR_SUMMARY",
    "DEBUG_MODE", "LOG_LEVEL", "MAX_UPLOAD_SIZE_MB", "SUPPORTED_IMAGE_FORMATS",
}


class FakeAIService(AIServiceInterface):
    """Records every call and answers with canned values (or fails on demand)."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, tuple]] = []

    def _record(self, name: str, *args):
        self.calls.append((name, args))
        if self.fail:
            raise AIServiceError(f"{name} unavailable")

    async def summarize(self, expense_records):
        self._record("summarize", expense_records)
        return "You spend most on Subscriptions."

    async def analyze(self, expenses_json, question, use_detailed_model):
        self._record("analyze", expenses_json, question, use_detailed_model)
        return f"Analysis: {question}"

    async def chat(self, history, message):
        self._record("chat", history, message)
        return f"Echo: {message}"

    async def generate_image(self, prompt):
        self._record("generate_image", prompt)
        return "data:image/jpeg;base64,aGVsbG8="

    async def edit_image(self, image_bytes, mime_type, prompt):
        self._record("edit_image", image_bytes, mime_type, prompt)
        return "data:image/png;base64,ZWRpdGVk"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep settings independent of the developer's environment and .env."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith(("GEMINI_", "STORAGE_")) or name in APP_SETTINGS_ENV:
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def manager(store) -> ExpenseStateManager:
    return ExpenseStateManager(store)


@pytest.fixture
def populated_manager(manager) -> ExpenseStateManager:
    """The three expenses used throughout the examples."""
    manager.add_expense("Coffee", 500, "Food", date(2024, 1, 1))
    manager.add_expense("Netflix", 1500, "Subscriptions", date(2024, 1, 2))
    manager.add_expense("Bus", 200, "Transportation", date(2024, 1, 3))
    return manager


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def failing_ai() -> FakeAIService:
    return FakeAIService(fail=True)
