"""
Gemini AI Service

Implements AIServiceInterface on the google-genai SDK.

MODELS (configurable via GEMINI_* settings):
- Summary and chat: a fast general model
- Analysis: a lite model, or a pro model with a thinking budget when
  the user asks for a detailed answer
- Image editing: an image-capable Gemini model asked for IMAGE output
- Image generation: Imagen

The assistant only ever sees the data it is handed in the prompt.
"""

import base64
import json
from typing import Any, Optional

from google import genai
from google.genai import types

from expense_tracker.agents.interface import (
    AIServiceError,
    AIServiceInterface,
    NoImageReturnedError,
)
from expense_tracker.config import GeminiSettings, get_settings
from expense_tracker.models import ChatMessage, ChatRole


GENERATED_IMAGE_MIME_TYPE = "image/jpeg"


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a data: URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def from_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data: URI into (mime_type, raw bytes)."""
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URI")
    mime_type = header[len("data:"):-len(";base64")]
    return mime_type, base64.b64decode(payload)


def to_gemini_history(history: list[ChatMessage]) -> list[types.Content]:
    """Convert our chat log to Gemini contents ('assistant' is 'model' there)."""
    return [
        types.Content(
            role="model" if message.role == ChatRole.ASSISTANT else "user",
            parts=[types.Part(text=message.text)],
        )
        for message in history
    ]


class GeminiAIService(AIServiceInterface):
    """
    Gemini-backed AI capability.

    The SDK client is created on first use, so the app can start (and
    the tracker can be used) without a Gemini key configured.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        client: Optional[genai.Client] = None,
    ):
        self._settings = settings
        self._client = client

    @property
    def settings(self) -> GeminiSettings:
        if self._settings is None:
            self._settings = get_settings().gemini
        return self._settings

    def _get_client(self) -> genai.Client:
        """Get or create the Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.api_key)
        return self._client

    async def _generate_text(
        self,
        model: str,
        contents: Any,
        config: Optional[types.GenerateContentConfig] = None,
    ) -> str:
        response = await self._get_client().aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )
        if not response.text:
            raise AIServiceError(f"Empty response from {model}")
        return response.text

    async def summarize(self, expense_records: list[dict[str, Any]]) -> str:
        expenses_json = json.dumps(expense_records, default=str)
        prompt = f"""Based on the following JSON expense data, provide a brief, insightful summary of spending habits (2-3 sentences). Highlight the top spending category and any potential areas for savings.

Expense Data:
{expenses_json}"""

        return await self._generate_text(self.settings.summary_model, prompt)

    async def analyze(
        self,
        expenses_json: str,
        question: str,
        use_detailed_model: bool,
    ) -> str:
        prompt = (
            f"Here is my expense data in JSON format:\n\n{expenses_json}\n\n"
            f"Based on this data, please answer the following question: {question}. "
            "Provide a concise, insightful analysis."
        )

        if use_detailed_model:
            return await self._generate_text(
                self.settings.detailed_analysis_model,
                prompt,
                types.GenerateContentConfig(
                    thinking_config=types.ThinkingConfig(
                        thinking_budget=self.settings.thinking_budget,
                    ),
                ),
            )
        return await self._generate_text(self.settings.analysis_model, prompt)

    async def chat(self, history: list[ChatMessage], message: str) -> str:
        # A fresh chat per call, seeded with the full history, keeps
        # this service stateless.
        session = self._get_client().aio.chats.create(
            model=self.settings.chat_model,
            history=to_gemini_history(history),
            config=types.GenerateContentConfig(
                system_instruction=self.settings.chat_system_instruction,
            ),
        )
        response = await session.send_message(message)
        if not response.text:
            raise AIServiceError("Empty chat response")
        return response.text

    async def generate_image(self, prompt: str) -> str:
        response = await self._get_client().aio.models.generate_images(
            model=self.settings.image_generation_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=GENERATED_IMAGE_MIME_TYPE,
                aspect_ratio="1:1",
            ),
        )

        if response.generated_images:
            image = response.generated_images[0].image
            if image is not None and image.image_bytes:
                return to_data_uri(image.image_bytes, GENERATED_IMAGE_MIME_TYPE)
        raise NoImageReturnedError("Image generation failed.")

    async def edit_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        response = await self._get_client().aio.models.generate_content(
            model=self.settings.image_edit_model,
            contents=types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    types.Part(text=prompt),
                ],
            ),
            config=types.GenerateContentConfig(
                response_modalities=[types.Modality.IMAGE],
            ),
        )

        for candidate in response.candidates or []:
            content = candidate.content
            for part in (content.parts if content else None) or []:
                if part.inline_data and part.inline_data.data:
                    return to_data_uri(
                        part.inline_data.data,
                        part.inline_data.mime_type or mime_type,
                    )
        raise NoImageReturnedError("No image generated from the edit prompt.")
