"""Unit tests for GeminiTryOnClient - request building and response parsing."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import types

from fitting_room.config import AppConfig
from fitting_room.errors import GenerationFailed, MissingCredential, NoCandidates, NoImageReturned
from fitting_room.services.gemini_client import (
    MODEL_NAME,
    TRYON_DIRECTIVE,
    GeminiTryOnClient,
    build_contents,
    parse_response,
)


def inline_part(data, mime_type="image/png"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def response_with(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


@pytest.fixture
def sdk_client():
    """Stand-in for genai.Client exposing aio.models.generate_content."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


class TestBuildContents:
    """Tests for the outbound request shape."""

    def test_parts_in_order(self, person_image, outfit_image):
        """Person image, outfit image, then the directive."""
        content = build_contents(person_image, outfit_image)

        assert len(content.parts) == 3
        assert content.parts[0].inline_data.data == person_image.to_bytes()
        assert content.parts[0].inline_data.mime_type == "image/jpeg"
        assert content.parts[1].inline_data.data == outfit_image.to_bytes()
        assert content.parts[1].inline_data.mime_type == "image/png"
        assert content.parts[2].text == TRYON_DIRECTIVE

    def test_directive_preserves_identity(self):
        directive = TRYON_DIRECTIVE.lower()

        assert "first image" in directive
        assert "second image" in directive
        assert "pose" in directive
        assert "face" in directive
        assert "background" in directive
        assert "text overlay" in directive


class TestParseResponse:
    """Tests for splitting the response into image and text."""

    def test_image_and_text(self):
        result = parse_response(response_with(inline_part("AAA"), text_part("ok")))

        assert result.image == "data:image/png;base64,AAA"
        assert result.text == "ok"

    def test_bytes_payload_is_base64_encoded(self):
        result = parse_response(response_with(inline_part(b"\x00\x00", "image/jpeg")))

        assert result.image == "data:image/jpeg;base64," + base64.b64encode(b"\x00\x00").decode()
        assert result.text is None

    def test_last_part_wins(self):
        """Later parts overwrite earlier ones, for images and for text."""
        result = parse_response(response_with(
            text_part("first"),
            inline_part("AAA"),
            text_part("second"),
            inline_part("BBB", "image/webp"),
        ))

        assert result.image == "data:image/webp;base64,BBB"
        assert result.text == "second"

    def test_only_first_candidate_read(self):
        response = SimpleNamespace(candidates=[
            SimpleNamespace(content=SimpleNamespace(parts=[inline_part("AAA")])),
            SimpleNamespace(content=SimpleNamespace(parts=[inline_part("ZZZ")])),
        ])

        assert parse_response(response).image == "data:image/png;base64,AAA"

    @pytest.mark.parametrize("candidates", [[], None])
    def test_no_candidates(self, candidates):
        with pytest.raises(NoCandidates) as exc_info:
            parse_response(SimpleNamespace(candidates=candidates))

        assert "blocked" in str(exc_info.value)

    def test_text_only_is_refusal(self):
        with pytest.raises(NoImageReturned) as exc_info:
            parse_response(response_with(text_part("I can't help with that.")))

        assert "refused" in str(exc_info.value)

    def test_candidate_without_content(self):
        response = SimpleNamespace(candidates=[SimpleNamespace(content=None)])

        with pytest.raises(NoImageReturned):
            parse_response(response)

    def test_sdk_response_object(self):
        """Works on the SDK's own response types."""
        response = types.GenerateContentResponse(candidates=[
            types.Candidate(content=types.Content(role="model", parts=[
                types.Part.from_bytes(data=b"\x01\x02\x03", mime_type="image/png"),
                types.Part.from_text(text="Here you go"),
            ])),
        ])

        result = parse_response(response)

        assert result.image == "data:image/png;base64,AQID"
        assert result.text == "Here you go"


class TestGeminiTryOnClient:
    """Tests for the client call and error wrapping."""

    def test_missing_api_key(self):
        with pytest.raises(MissingCredential):
            GeminiTryOnClient(None)

    def test_from_config_builds_sdk_client(self):
        with patch("fitting_room.services.gemini_client.genai.Client") as client_cls:
            client = GeminiTryOnClient.from_config(AppConfig(api_key="test-key"))

        client_cls.assert_called_once_with(api_key="test-key")
        assert client.model == MODEL_NAME

    @pytest.mark.asyncio
    async def test_generate_sends_request(self, sdk_client, person_image, outfit_image):
        sdk_client.aio.models.generate_content.return_value = response_with(
            inline_part("AAA"), text_part("ok")
        )
        client = GeminiTryOnClient("key", client=sdk_client)

        result = await client.generate(person_image, outfit_image)

        assert result.image == "data:image/png;base64,AAA"
        assert result.text == "ok"
        kwargs = sdk_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == MODEL_NAME
        assert list(kwargs["config"].response_modalities) == ["IMAGE", "TEXT"]
        assert kwargs["contents"].parts[2].text == TRYON_DIRECTIVE

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, sdk_client, person_image, outfit_image):
        sdk_client.aio.models.generate_content.side_effect = ConnectionError("network down")
        client = GeminiTryOnClient("key", client=sdk_client)

        with pytest.raises(GenerationFailed) as exc_info:
            await client.generate(person_image, outfit_image)

        assert exc_info.value.details == "network down"
        assert str(exc_info.value).startswith(GenerationFailed.PREFIX)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_no_candidates_propagates_as_generation_failed(self, sdk_client, person_image, outfit_image):
        sdk_client.aio.models.generate_content.return_value = SimpleNamespace(candidates=[])
        client = GeminiTryOnClient("key", client=sdk_client)

        with pytest.raises(GenerationFailed) as exc_info:
            await client.generate(person_image, outfit_image)

        assert isinstance(exc_info.value, NoCandidates)

    @pytest.mark.asyncio
    async def test_never_retries(self, sdk_client, person_image, outfit_image):
        sdk_client.aio.models.generate_content.side_effect = RuntimeError("boom")
        client = GeminiTryOnClient("key", client=sdk_client)

        with pytest.raises(GenerationFailed):
            await client.generate(person_image, outfit_image)

        assert sdk_client.aio.models.generate_content.await_count == 1
