"""Tests for the insights flows and the component factory."""

import asyncio
import json
from datetime import date

from expense_tracker.audit import AuditLogger
from expense_tracker.models import ChangeKind, ChatMessage, ChatRole, ImageUpload
from expense_tracker.orchestrator import (
    ANALYSIS_FAILED_MESSAGE,
    CHAT_FAILED_MESSAGE,
    IMAGE_AND_PROMPT_REQUIRED_MESSAGE,
    IMAGE_EDIT_FAILED_MESSAGE,
    IMAGE_GENERATION_FAILED_MESSAGE,
    NO_EXPENSES_TO_ANALYZE_MESSAGE,
    PROMPT_REQUIRED_MESSAGE,
    SUMMARY_FAILED_MESSAGE,
    InsightsFlow,
    add_category_from_input,
    create_app_components,
    create_store,
    rename_category_from_input,
)
from expense_tracker.services.storage import InMemoryStore, JsonFileStore


def run(coro):
    return asyncio.run(coro)


def make_flow(ai_service, min_expenses=3) -> InsightsFlow:
    return InsightsFlow(
        ai_service=ai_service,
        audit_logger=AuditLogger(),
        min_expenses_for_summary=min_expenses,
    )


class TestSummary:
    """Tests for InsightsFlow.summarize_expenses."""

    def test_needs_minimum_expenses(self, manager, fake_ai):
        """Test that nothing is sent below the threshold."""
        manager.add_expense("Coffee", 500, "Food", date(2024, 1, 1))
        reply = run(make_flow(fake_ai).summarize_expenses(manager.expenses))
        assert reply.success is False
        assert reply.error_message == "Add at least 3 expenses to generate a summary."
        assert fake_ai.calls == []

    def test_summary_strips_ids(self, populated_manager, fake_ai):
        """Test the records handed to the AI service."""
        reply = run(make_flow(fake_ai).summarize_expenses(populated_manager.expenses))
        assert reply.success is True
        assert reply.text == "You spend most on Subscriptions."

        name, (records,) = fake_ai.calls[0]
        assert name == "summarize"
        assert len(records) == 3
        assert "id" not in records[0]
        assert records[0]["description"] == "Coffee"

    def test_summary_failure(self, populated_manager, failing_ai):
        """Test that an AI error becomes the fixed message."""
        reply = run(make_flow(failing_ai).summarize_expenses(populated_manager.expenses))
        assert reply.success is False
        assert reply.error_message == SUMMARY_FAILED_MESSAGE
        assert reply.text is None


class TestAnalysis:
    """Tests for InsightsFlow.analyze_expenses."""

    def test_no_expenses(self, fake_ai):
        """Test analysis of an empty ledger."""
        reply = run(make_flow(fake_ai).analyze_expenses([], "Where can I save?"))
        assert reply.error_message == NO_EXPENSES_TO_ANALYZE_MESSAGE
        assert fake_ai.calls == []

    def test_sends_full_records(self, populated_manager, fake_ai):
        """Test that analysis sends every record, ids included."""
        reply = run(make_flow(fake_ai).analyze_expenses(
            populated_manager.expenses, "Where can I save?", use_detailed_model=True,
        ))
        assert reply.text == "Analysis: Where can I save?"

        name, (expenses_json, question, detailed) = fake_ai.calls[0]
        records = json.loads(expenses_json)
        assert len(records) == 3
        assert records[1]["id"] == str(populated_manager.expenses[1].id)
        assert detailed is True

    def test_analysis_failure(self, populated_manager, failing_ai):
        """Test the failure message."""
        reply = run(make_flow(failing_ai).analyze_expenses(
            populated_manager.expenses, "Anything?",
        ))
        assert reply.error_message == ANALYSIS_FAILED_MESSAGE

    def test_ai_failure_leaves_state_untouched(self, populated_manager, store, failing_ai):
        """Test that AI errors never reach the collections."""
        before = {key: store.raw(key) for key in store.keys()}
        run(make_flow(failing_ai).analyze_expenses(
            populated_manager.expenses, "Anything?",
        ))
        assert {key: store.raw(key) for key in store.keys()} == before
        assert len(populated_manager.expenses) == 3


class TestChat:
    """Tests for InsightsFlow.chat."""

    def test_blank_message_is_not_sent(self, fake_ai):
        """Test that a blank message returns None."""
        assert run(make_flow(fake_ai).chat([], "   ")) is None
        assert fake_ai.calls == []

    def test_reply_with_history(self, fake_ai):
        """Test that history is passed through."""
        history = [
            ChatMessage(role=ChatRole.USER, text="Hi"),
            ChatMessage(role=ChatRole.ASSISTANT, text="Hello!"),
        ]
        reply = run(make_flow(fake_ai).chat(history, "How do I budget?"))
        assert reply.text == "Echo: How do I budget?"
        assert fake_ai.calls[0][1][0] == history

    def test_chat_failure(self, failing_ai):
        """Test the connection-trouble reply."""
        reply = run(make_flow(failing_ai).chat([], "Hi"))
        assert reply.success is False
        assert reply.error_message == CHAT_FAILED_MESSAGE


class TestImages:
    """Tests for the image flows."""

    def test_generate_requires_prompt(self, fake_ai):
        """Test the empty prompt."""
        reply = run(make_flow(fake_ai).generate_image(""))
        assert reply.error_message == PROMPT_REQUIRED_MESSAGE

    def test_generate(self, fake_ai):
        """Test a generated image."""
        reply = run(make_flow(fake_ai).generate_image("a piggy bank"))
        assert reply.success is True
        assert reply.image_data_uri.startswith("data:image/jpeg;base64,")

    def test_generate_failure(self, failing_ai):
        """Test the failure message."""
        reply = run(make_flow(failing_ai).generate_image("a piggy bank"))
        assert reply.error_message == IMAGE_GENERATION_FAILED_MESSAGE

    def test_edit_requires_image_and_prompt(self, fake_ai):
        """Test edit with pieces missing."""
        upload = ImageUpload(filename="a.png", mime_type="image/png", size_bytes=3)
        flow = make_flow(fake_ai)
        assert run(flow.edit_image(None, None, "add a hat")).error_message == IMAGE_AND_PROMPT_REQUIRED_MESSAGE
        assert run(flow.edit_image(upload, b"png", " ")).error_message == IMAGE_AND_PROMPT_REQUIRED_MESSAGE
        assert fake_ai.calls == []

    def test_edit_rejects_unsupported_type(self, fake_ai):
        """Test that upload validation runs before the AI call."""
        upload = ImageUpload(filename="a.gif", mime_type="image/gif", size_bytes=3)
        reply = run(make_flow(fake_ai).edit_image(upload, b"gif", "add a hat"))
        assert reply.success is False
        assert "Unsupported image type" in reply.error_message
        assert fake_ai.calls == []

    def test_edit(self, fake_ai):
        """Test an edited image."""
        upload = ImageUpload(filename="a.png", mime_type="image/png", size_bytes=3)
        reply = run(make_flow(fake_ai).edit_image(upload, b"png", "add a hat"))
        assert reply.image_data_uri == "data:image/png;base64,ZWRpdGVk"
        assert fake_ai.calls[0] == ("edit_image", (b"png", "image/png", "add a hat"))

    def test_edit_failure(self, failing_ai):
        """Test the failure message."""
        upload = ImageUpload(filename="a.png", mime_type="image/png", size_bytes=3)
        reply = run(make_flow(failing_ai).edit_image(upload, b"png", "add a hat"))
        assert reply.error_message == IMAGE_EDIT_FAILED_MESSAGE


class TestCategoryInput:
    """Tests for the category add and rename helpers used by the UI."""

    def test_add_trims_label(self, manager):
        """Test a new label with surrounding whitespace."""
        assert add_category_from_input(manager, "  Rent ") is None
        assert manager.categories[-1] == "Rent"

    def test_add_duplicate_returns_warning(self, manager):
        """Test the warning for an existing label."""
        assert add_category_from_input(manager, "Food") == "'Food' already exists."

    def test_add_blank_is_silent(self, manager, store):
        """Test that blank input does nothing."""
        assert add_category_from_input(manager, "   ") is None
        assert store.write_count == 0

    def test_rejected_rename_returns_warning(self, manager, store):
        """Test that a rename onto an existing label reports why it failed."""
        manager.add_category("Rent")
        writes = store.write_count

        assert rename_category_from_input(manager, "Rent", " Food ") == "'Food' already exists."
        assert "Rent" in manager.categories
        assert store.write_count == writes

    def test_rename(self, manager):
        """Test a successful rename."""
        manager.add_category("Rent")
        assert rename_category_from_input(manager, "Rent", "Housing") is None
        assert "Housing" in manager.categories

    def test_unchanged_or_blank_rename_is_silent(self, manager, store):
        """Test that saving the same or an empty name does nothing."""
        manager.add_category("Rent")
        writes = store.write_count
        assert rename_category_from_input(manager, "Rent", "Rent ") is None
        assert rename_category_from_input(manager, "Rent", "") is None
        assert store.write_count == writes


class TestFactory:
    """Tests for create_store and create_app_components."""

    def test_create_store_defaults_to_json_files(self):
        """Test the default backend."""
        assert isinstance(create_store(), JsonFileStore)

    def test_create_store_in_memory(self, monkeypatch):
        """Test STORAGE_IN_MEMORY."""
        monkeypatch.setenv("STORAGE_IN_MEMORY", "true")
        assert isinstance(create_store(), InMemoryStore)

    def test_components_are_wired(self, fake_ai):
        """Test that the audit logger hears state changes."""
        state_manager, insights_flow, audit_logger = create_app_components(
            store=InMemoryStore(), ai_service=fake_ai,
        )
        state_manager.add_category("Rent")

        assert [c.kind for c in audit_logger.recent()] == [ChangeKind.CATEGORY_ADDED]
        assert insights_flow.min_expenses_for_summary == 3

    def test_presets_come_from_settings(self, monkeypatch, fake_ai):
        """Test PRESET_CATEGORIES and ALLOW_PRESET_RENAME."""
        monkeypatch.setenv("PRESET_CATEGORIES", "Bills, Food ,Bills")
        monkeypatch.setenv("ALLOW_PRESET_RENAME", "false")
        state_manager, _, _ = create_app_components(store=InMemoryStore(), ai_service=fake_ai)

        assert state_manager.categories == ["Bills", "Food"]
        assert state_manager.rename_category("Bills", "Utilities") is False


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_recent_is_newest_first_and_bounded(self, manager):
        """Test the recent activity list."""
        audit_logger = AuditLogger(history_size=2)
        manager.subscribe(audit_logger)
        manager.add_category("A")
        manager.add_category("B")
        manager.add_category("C")

        recent = audit_logger.recent()
        assert [c.details["category"] for c in recent] == ["C", "B"]
        assert len(audit_logger.recent(limit=1)) == 1
