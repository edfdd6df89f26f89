"""Tests for the Gemini AI service, against a fake SDK client."""

import asyncio
import base64
import json
from types import SimpleNamespace

import pytest

from expense_tracker.agents import (
    AIServiceError,
    GeminiAIService,
    NoImageReturnedError,
    from_data_uri,
    to_data_uri,
    to_gemini_history,
)
from expense_tracker.config import GeminiSettings
from expense_tracker.models import ChatMessage, ChatRole


class FakeModels:
    def __init__(self, text="ok", images=None, candidates=None):
        self.text = text
        self.images = images if images is not None else []
        self.candidates = candidates if candidates is not None else []
        self.content_calls = []
        self.image_calls = []

    async def generate_content(self, model, contents, config=None):
        self.content_calls.append({"model": model, "contents": contents, "config": config})
        return SimpleNamespace(text=self.text, candidates=self.candidates)

    async def generate_images(self, model, prompt, config=None):
        self.image_calls.append({"model": model, "prompt": prompt, "config": config})
        return SimpleNamespace(generated_images=self.images)


class FakeChatSession:
    def __init__(self, reply):
        self.reply = reply
        self.sent = []

    async def send_message(self, message):
        self.sent.append(message)
        return SimpleNamespace(text=self.reply)


class FakeChats:
    def __init__(self, reply="Hello!"):
        self.reply = reply
        self.created = []
        self.session = None

    def create(self, model, history=None, config=None):
        self.created.append({"model": model, "history": history, "config": config})
        self.session = FakeChatSession(self.reply)
        return self.session


def make_client(models=None, chats=None):
    return SimpleNamespace(aio=SimpleNamespace(
        models=models or FakeModels(),
        chats=chats or FakeChats(),
    ))


def make_service(client) -> GeminiAIService:
    return GeminiAIService(settings=GeminiSettings(api_key="test-key"), client=client)


def inline_part(data, mime_type):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


class TestDataUris:
    """Tests for the data URI helpers."""

    def test_to_data_uri(self):
        """Test encoding."""
        assert to_data_uri(b"hello", "image/jpeg") == "data:image/jpeg;base64,aGVsbG8="

    def test_from_data_uri(self):
        """Test decoding."""
        assert from_data_uri("data:image/png;base64,aGVsbG8=") == ("image/png", b"hello")

    @pytest.mark.parametrize("uri", ["hello", "data:image/png,aGVsbG8=", "http://x/y.png"])
    def test_from_data_uri_rejects_other_text(self, uri):
        """Test non-base64 URIs."""
        with pytest.raises(ValueError):
            from_data_uri(uri)


class TestHistory:
    """Tests for to_gemini_history."""

    def test_roles_are_mapped(self):
        """Test that assistant turns become model turns."""
        contents = to_gemini_history([
            ChatMessage(role=ChatRole.USER, text="Hi"),
            ChatMessage(role=ChatRole.ASSISTANT, text="Hello!"),
        ])
        assert [c.role for c in contents] == ["user", "model"]
        assert contents[1].parts[0].text == "Hello!"


class TestTextOperations:
    """Tests for summarize, analyze and chat."""

    def test_summarize_prompt_contains_records(self):
        """Test the summary request."""
        models = FakeModels(text="Mostly subscriptions.")
        service = make_service(make_client(models=models))
        records = [{"description": "Netflix", "amount": "1500", "category": "Subscriptions", "date": "2024-01-02"}]

        assert asyncio.run(service.summarize(records)) == "Mostly subscriptions."

        call = models.content_calls[0]
        assert call["model"] == "gemini-2.5-flash"
        assert json.dumps(records) in call["contents"]

    def test_analyze_uses_lite_model(self):
        """Test the quick analysis path."""
        models = FakeModels()
        service = make_service(make_client(models=models))
        asyncio.run(service.analyze("[]", "Where can I save?", use_detailed_model=False))

        call = models.content_calls[0]
        assert call["model"] == "gemini-flash-lite-latest"
        assert call["config"] is None
        assert "Where can I save?" in call["contents"]

    def test_detailed_analysis_sets_thinking_budget(self):
        """Test the detailed analysis path."""
        models = FakeModels()
        service = make_service(make_client(models=models))
        asyncio.run(service.analyze("[]", "Where can I save?", use_detailed_model=True))

        call = models.content_calls[0]
        assert call["model"] == "gemini-2.5-pro"
        assert call["config"].thinking_config.thinking_budget == 32768

    def test_empty_response_raises(self):
        """Test that an empty answer is an error."""
        service = make_service(make_client(models=FakeModels(text="")))
        with pytest.raises(AIServiceError):
            asyncio.run(service.summarize([]))

    def test_chat_seeds_history(self):
        """Test that each chat call starts a session with the full history."""
        chats = FakeChats(reply="Try a budget.")
        service = make_service(make_client(chats=chats))
        history = [ChatMessage(role=ChatRole.USER, text="Hi")]

        assert asyncio.run(service.chat(history, "Any tips?")) == "Try a budget."

        created = chats.created[0]
        assert created["model"] == "gemini-2.5-flash"
        assert created["history"][0].role == "user"
        assert "financial assistant" in created["config"].system_instruction
        assert chats.session.sent == ["Any tips?"]


class TestImageOperations:
    """Tests for generate_image and edit_image."""

    def test_generate_image(self):
        """Test that generated bytes come back as a JPEG data URI."""
        image = SimpleNamespace(image=SimpleNamespace(image_bytes=b"jpeg-bytes"))
        models = FakeModels(images=[image])
        service = make_service(make_client(models=models))

        uri = asyncio.run(service.generate_image("a piggy bank"))

        assert uri == "data:image/jpeg;base64," + base64.b64encode(b"jpeg-bytes").decode()
        config = models.image_calls[0]["config"]
        assert config.number_of_images == 1
        assert config.aspect_ratio == "1:1"

    def test_generate_image_without_result(self):
        """Test an empty generation response."""
        service = make_service(make_client(models=FakeModels(images=[])))
        with pytest.raises(NoImageReturnedError):
            asyncio.run(service.generate_image("a piggy bank"))

    def test_edit_image_finds_inline_data(self):
        """Test that the first image part in the response is returned."""
        candidate = SimpleNamespace(content=SimpleNamespace(parts=[
            text_part("Here you go"),
            inline_part(b"edited", "image/png"),
        ]))
        models = FakeModels(candidates=[candidate])
        service = make_service(make_client(models=models))

        uri = asyncio.run(service.edit_image(b"original", "image/jpeg", "add a hat"))

        assert from_data_uri(uri) == ("image/png", b"edited")
        call = models.content_calls[0]
        assert call["model"] == "gemini-2.5-flash-image"
        assert call["contents"].parts[0].inline_data.data == b"original"
        assert call["contents"].parts[1].text == "add a hat"

    def test_edit_image_falls_back_to_input_mime_type(self):
        """Test a part without a mime type."""
        candidate = SimpleNamespace(content=SimpleNamespace(parts=[inline_part(b"edited", None)]))
        service = make_service(make_client(models=FakeModels(candidates=[candidate])))
        uri = asyncio.run(service.edit_image(b"original", "image/webp", "add a hat"))
        assert uri.startswith("data:image/webp;base64,")

    def test_edit_image_without_image(self):
        """Test a text-only answer."""
        candidate = SimpleNamespace(content=SimpleNamespace(parts=[text_part("Sorry")]))
        service = make_service(make_client(models=FakeModels(candidates=[candidate])))
        with pytest.raises(NoImageReturnedError):
            asyncio.run(service.edit_image(b"original", "image/png", "add a hat"))
