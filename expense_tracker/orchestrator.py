"""
Main Orchestrator for AI Expense Tracker

This module ties together all the components:
1. State (expenses, budgets, categories) with its persistence mirror
2. Insights (summary, analysis, chat, image tools) via the AI service

DESIGN DECISION: AI failures stop HERE.
Each insights flow checks its input, calls the AI service once,
and turns any failure into a fixed, friendly message. The error is
logged, and the tracker's collections are never touched; AI output is
only ever displayed.
"""

import json
from typing import Optional

from expense_tracker.agents import AIServiceInterface, GeminiAIService
from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import get_settings
from expense_tracker.models import (
    AssistantReply,
    ChatMessage,
    Expense,
    ImageUpload,
)
from expense_tracker.services.storage import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStoreInterface,
)
from expense_tracker.state import ExpenseStateManager
from expense_tracker.validation import normalize_category_label, validate_image_upload


SUMMARY_FAILED_MESSAGE = "Failed to generate summary. Please try again."
ANALYSIS_FAILED_MESSAGE = "Failed to get analysis. Please try again."
CHAT_FAILED_MESSAGE = "Sorry, I'm having trouble connecting. Please try again later."
IMAGE_GENERATION_FAILED_MESSAGE = "Failed to generate image. Please try again."
IMAGE_EDIT_FAILED_MESSAGE = "Failed to edit image. Please try again."

CATEGORY_EXISTS_MESSAGE = "'{label}' already exists."

NO_EXPENSES_TO_ANALYZE_MESSAGE = "No expense data to analyze."
PROMPT_REQUIRED_MESSAGE = "Please enter a prompt."
IMAGE_AND_PROMPT_REQUIRED_MESSAGE = "Please select an image and enter a prompt."


class InsightsFlow:
    """
    Orchestrates the AI-powered features.

    Every method returns an AssistantReply and never raises for
    AI or network errors.
    """

    def __init__(
        self,
        ai_service: Optional[AIServiceInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        min_expenses_for_summary: Optional[int] = None,
    ):
        self._ai_service = ai_service or GeminiAIService()
        self._audit_logger = audit_logger or AuditLogger()
        self._min_expenses_for_summary = (
            min_expenses_for_summary
            if min_expenses_for_summary is not None
            else get_settings().app.min_expenses_for_summary
        )

    @property
    def min_expenses_for_summary(self) -> int:
        return self._min_expenses_for_summary

    def _rejected(self, operation: str, message: str) -> AssistantReply:
        self._audit_logger.log_input_rejected(operation, message)
        return AssistantReply.failed(message)

    def _failed(self, operation: str, error: Exception, message: str) -> AssistantReply:
        self._audit_logger.log_ai_request_failed(operation, error)
        return AssistantReply.failed(message)

    async def summarize_expenses(self, expenses: list[Expense]) -> AssistantReply:
        """
        Short summary of spending habits.

        Needs a minimum number of expenses. Ids are stripped before
        the data is sent.
        """
        if len(expenses) < self._min_expenses_for_summary:
            return self._rejected(
                "summarize",
                f"Add at least {self._min_expenses_for_summary} expenses to generate a summary.",
            )

        records = [expense.model_dump(mode="json", exclude={"id"}) for expense in expenses]
        self._audit_logger.log_ai_request("summarize", expense_count=len(records))
        try:
            text = await self._ai_service.summarize(records)
        except Exception as e:
            return self._failed("summarize", e, SUMMARY_FAILED_MESSAGE)
        return AssistantReply(success=True, text=text)

    async def analyze_expenses(
        self,
        expenses: list[Expense],
        question: str,
        use_detailed_model: bool = False,
    ) -> AssistantReply:
        """Answer a free-text question about all expenses."""
        if not expenses:
            return self._rejected("analyze", NO_EXPENSES_TO_ANALYZE_MESSAGE)

        expenses_json = json.dumps(
            [expense.model_dump(mode="json") for expense in expenses],
            indent=2,
        )
        self._audit_logger.log_ai_request(
            "analyze",
            expense_count=len(expenses),
            detailed=use_detailed_model,
        )
        try:
            text = await self._ai_service.analyze(expenses_json, question, use_detailed_model)
        except Exception as e:
            return self._failed("analyze", e, ANALYSIS_FAILED_MESSAGE)
        return AssistantReply(success=True, text=text)

    async def chat(
        self,
        history: list[ChatMessage],
        message: str,
    ) -> Optional[AssistantReply]:
        """
        Reply to a chat message.

        Returns None for a blank message (nothing is sent). On failure
        the reply's error_message is meant to be shown as the
        assistant's turn.
        """
        if not message or not message.strip():
            return None

        self._audit_logger.log_ai_request("chat", history_length=len(history))
        try:
            text = await self._ai_service.chat(list(history), message)
        except Exception as e:
            return self._failed("chat", e, CHAT_FAILED_MESSAGE)
        return AssistantReply(success=True, text=text)

    async def generate_image(self, prompt: str) -> AssistantReply:
        if not prompt or not prompt.strip():
            return self._rejected("generate_image", PROMPT_REQUIRED_MESSAGE)

        self._audit_logger.log_ai_request("generate_image")
        try:
            uri = await self._ai_service.generate_image(prompt)
        except Exception as e:
            return self._failed("generate_image", e, IMAGE_GENERATION_FAILED_MESSAGE)
        return AssistantReply(success=True, image_data_uri=uri)

    async def edit_image(
        self,
        upload: Optional[ImageUpload],
        image_bytes: Optional[bytes],
        prompt: str,
    ) -> AssistantReply:
        if upload is None or not image_bytes or not prompt or not prompt.strip():
            return self._rejected("edit_image", IMAGE_AND_PROMPT_REQUIRED_MESSAGE)

        validation = validate_image_upload(upload)
        if not validation.is_valid:
            return self._rejected("edit_image", validation.first_message)

        self._audit_logger.log_ai_request(
            "edit_image",
            mime_type=upload.mime_type,
            size_bytes=upload.size_bytes,
        )
        try:
            uri = await self._ai_service.edit_image(image_bytes, upload.mime_type, prompt)
        except Exception as e:
            return self._failed("edit_image", e, IMAGE_EDIT_FAILED_MESSAGE)
        return AssistantReply(success=True, image_data_uri=uri)


def add_category_from_input(state: ExpenseStateManager, raw_label: Optional[str]) -> Optional[str]:
    """
    Add a category typed by the user.

    Returns a warning to show, or None when the label was added or was blank.
    """
    label = normalize_category_label(raw_label)
    if label and not state.add_category(label):
        return CATEGORY_EXISTS_MESSAGE.format(label=label)
    return None


def rename_category_from_input(
    state: ExpenseStateManager,
    old_label: str,
    raw_label: Optional[str],
) -> Optional[str]:
    """
    Rename a category to a label typed by the user.

    A blank or unchanged label is a no-op. Returns a warning to show
    when the rename is rejected, otherwise None.
    """
    label = normalize_category_label(raw_label)
    if not label or label == old_label:
        return None
    if not state.rename_category(old_label, label):
        return CATEGORY_EXISTS_MESSAGE.format(label=label)
    return None


def create_store() -> KeyValueStoreInterface:
    """Build the key-value store described by the storage settings."""
    storage_settings = get_settings().storage
    if storage_settings.in_memory:
        return InMemoryStore()
    return JsonFileStore(storage_settings.data_path)


def create_app_components(
    store: Optional[KeyValueStoreInterface] = None,
    ai_service: Optional[AIServiceInterface] = None,
) -> tuple[ExpenseStateManager, InsightsFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        store: Persistence backend. Defaults to the configured store.
        ai_service: AI backend. Defaults to Gemini (client created lazily).

    Returns:
        (state_manager, insights_flow, audit_logger)
    """
    app_settings = get_settings().app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    audit_logger = AuditLogger()

    state_manager = ExpenseStateManager(
        store if store is not None else create_store(),
        presets=app_settings.preset_categories_list,
        allow_preset_rename=app_settings.allow_preset_rename,
    )
    state_manager.subscribe(audit_logger)

    insights_flow = InsightsFlow(
        ai_service=ai_service,
        audit_logger=audit_logger,
        min_expenses_for_summary=app_settings.min_expenses_for_summary,
    )

    return state_manager, insights_flow, audit_logger
