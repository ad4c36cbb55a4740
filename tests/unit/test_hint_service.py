# =============================================================================
# TESTS - Hint Service
# =============================================================================
# OpenAIHintService over httpx.MockTransport; no network access
# =============================================================================

import json

import httpx
import pytest

from quizplay.core.config import Settings
from quizplay.core.errors import HintGenerationError
from quizplay.services.hint_service import OpenAIHintService, build_prompt, parse_hints


def _config(**overrides) -> Settings:
    values = {"openai_api_key": "test-key", "openai_model": "gpt-test", "openai_base_url": "https://llm.test/v1"}
    values.update(overrides)
    return Settings(**values)


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestParseHints:
    def test_plain_json(self):
        assert parse_hints('{"hints": ["a", "b"]}', 2) == ["a", "b"]

    def test_fenced_json(self):
        content = '```json\n{"hints": ["Think of towers"]}\n```'

        assert parse_hints(content, 1) == ["Think of towers"]

    def test_wrong_count(self):
        with pytest.raises(HintGenerationError, match="Expected 2 hints, got 1"):
            parse_hints('{"hints": ["a"]}', 2)

    def test_not_json(self):
        with pytest.raises(HintGenerationError):
            parse_hints("Here are your hints!", 1)

    def test_missing_hints_key(self):
        with pytest.raises(HintGenerationError):
            parse_hints('{"answers": ["a"]}', 1)

    def test_prompt_lists_every_question(self):
        prompt = build_prompt(["First?", "Second?"])

        assert "Question 0: First?" in prompt
        assert "Question 1: Second?" in prompt


class TestOpenAIHintService:
    @pytest.mark.asyncio
    async def test_generates_one_hint_per_question(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"hints": ["Iron tower", "Look up"]}'))

        service = OpenAIHintService(_config(), transport=httpx.MockTransport(handler))

        hints = await service.generate_hints(["Capital of France?", "Does the Earth orbit the Sun?"])

        assert hints == ["Iron tower", "Look up"]
        assert seen["url"] == "https://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "gpt-test"
        assert "Capital of France?" in seen["body"]["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_hint_count_mismatch(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=_completion('{"hints": ["only one"]}')))
        service = OpenAIHintService(_config(), transport=transport)

        with pytest.raises(HintGenerationError):
            await service.generate_hints(["One?", "Two?"])

    @pytest.mark.asyncio
    async def test_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(429, json={"error": "rate limited"}))
        service = OpenAIHintService(_config(), transport=transport)

        with pytest.raises(HintGenerationError, match="429"):
            await service.generate_hints(["One?"])

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))
        service = OpenAIHintService(_config(), transport=transport)

        with pytest.raises(HintGenerationError, match="unexpected payload"):
            await service.generate_hints(["One?"])

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = OpenAIHintService(_config(), transport=httpx.MockTransport(handler))

        with pytest.raises(HintGenerationError, match="unavailable"):
            await service.generate_hints(["One?"])

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        service = OpenAIHintService(_config(openai_api_key=None))

        with pytest.raises(HintGenerationError, match="OPENAI_API_KEY"):
            await service.generate_hints(["One?"])

    @pytest.mark.asyncio
    async def test_no_questions(self):
        with pytest.raises(HintGenerationError) as exc_info:
            await OpenAIHintService(_config()).generate_hints([])

        assert exc_info.value.message == "At least one question is required."

    @pytest.mark.asyncio
    async def test_blank_question(self):
        with pytest.raises(HintGenerationError) as exc_info:
            await OpenAIHintService(_config()).generate_hints(["Fine?", "  "])

        assert exc_info.value.message == "Question text cannot be empty."
