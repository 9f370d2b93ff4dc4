"""Gemini API client for two-image virtual try-on generation."""

import base64
import logging
from typing import Any

from google import genai
from google.genai import types

from ..config import AppConfig
from ..errors import GenerationFailed, MissingCredential, NoCandidates, NoImageReturned
from ..models import PreparedImage, TryOnResult

logger = logging.getLogger(__name__)

MODEL_NAME = "gemini-2.5-flash-image-preview"

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]

TRYON_DIRECTIVE = (
    "Analyze the person in the first image and the clothing in the second image. "
    "Generate a new image showing the person from the first image wearing the outfit "
    "from the second image. The person's pose, face, and the background should be "
    "preserved from the first image. Do not include any text overlay on the generated image."
)


def build_contents(person: PreparedImage, outfit: PreparedImage) -> types.Content:
    """Build the request parts: person image, outfit image, then the directive."""
    return types.Content(
        role="user",
        parts=[
            types.Part.from_bytes(data=person.to_bytes(), mime_type=person.mime_type),
            types.Part.from_bytes(data=outfit.to_bytes(), mime_type=outfit.mime_type),
            types.Part.from_text(text=TRYON_DIRECTIVE),
        ],
    )


def _encode_payload(data: Any) -> str:
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(data).decode("ascii")
    return str(data)


def parse_response(response: Any) -> TryOnResult:
    """Split a generate_content response into image and text.

    Only the first candidate is read. Parts are scanned in order and the last
    inline image and the last text win.

    Raises:
        NoCandidates: if the response has no candidates
        NoImageReturned: if no part carried inline image data
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise NoCandidates()

    result_image: str | None = None
    result_text: str | None = None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        text = getattr(part, "text", None)
        if text:
            result_text = text
        elif inline is not None and inline.data:
            result_image = f"data:{inline.mime_type};base64,{_encode_payload(inline.data)}"

    if not result_image:
        raise NoImageReturned()

    return TryOnResult(image=result_image, text=result_text)


class GeminiTryOnClient:
    """Sends a person + outfit pair to Gemini and returns the dressed image."""

    def __init__(self, api_key: str | None, *, client: Any | None = None):
        if client is None:
            if not api_key:
                raise MissingCredential("API_KEY environment variable not set")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = MODEL_NAME

    @classmethod
    def from_config(cls, config: AppConfig) -> "GeminiTryOnClient":
        return cls(config.api_key)

    async def generate(self, person: PreparedImage, outfit: PreparedImage) -> TryOnResult:
        """Generate a try-on image.

        Args:
            person: Prepared photo of the person
            outfit: Prepared photo of the garment

        Returns:
            TryOnResult with the image as a data URL and any model commentary

        Raises:
            GenerationFailed: on any transport, SDK or model-side failure
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=build_contents(person, outfit),
                config=types.GenerateContentConfig(
                    response_modalities=RESPONSE_MODALITIES,
                ),
            )
            result = parse_response(response)
        except GenerationFailed as e:
            logger.error("Gemini returned no usable image: %s", e.details)
            raise
        except Exception as e:
            logger.error("Error calling Gemini API: %s", e)
            raise GenerationFailed(str(e)) from e

        logger.info(
            "Generated try-on image (%d chars, text=%s)",
            len(result.image or ""),
            "yes" if result.text else "no",
        )
        return result
