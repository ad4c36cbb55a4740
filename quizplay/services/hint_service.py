import json
import logging
from typing import List, Optional, Protocol, Sequence

import httpx

from quizplay.core.config import Settings, settings
from quizplay.core.errors import HintGenerationError

logger = logging.getLogger("hints")


class HintService(Protocol):
    async def generate_hints(self, questions: Sequence[str]) -> List[str]:
        """Return one hint per question, in the same order."""
        ...


def build_prompt(questions: Sequence[str]) -> str:
    listed = "\n".join(f"Question {idx}: {text}" for idx, text in enumerate(questions))
    return (
        "You are an AI quiz assistant that is helping create quizzes.\n\n"
        "You are provided a list of quiz questions. For each question, generate a hint "
        "that can help the user answer the question without giving away the answer.\n\n"
        f"Here are the questions:\n\n{listed}\n\n"
        "Return the hints in the same order as the questions were provided. "
        "Ensure the hints are helpful but not too obvious.\n"
        'Respond with JSON only, in the form {"hints": ["hint 1", "hint 2", ...]}.'
    )


def parse_hints(content: str, expected: int) -> List[str]:
    text = content.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as exc:
        raise HintGenerationError(f"Hint response was not valid JSON: {exc}") from exc

    hints = data.get("hints") if isinstance(data, dict) else None
    if not isinstance(hints, list) or not all(isinstance(h, str) for h in hints):
        raise HintGenerationError("Hint response did not contain a list of hints")
    if len(hints) != expected:
        raise HintGenerationError(f"Expected {expected} hints, got {len(hints)}")
    return hints


class OpenAIHintService:
    """Generates hints through an OpenAI-compatible chat completions endpoint."""

    def __init__(self, config: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or settings
        self.transport = transport

    async def generate_hints(self, questions: Sequence[str]) -> List[str]:
        questions = list(questions)
        if not questions:
            raise HintGenerationError("At least one question is required.")
        if any(not isinstance(q, str) or not q.strip() for q in questions):
            raise HintGenerationError("Question text cannot be empty.")
        if not self.config.openai_api_key:
            raise HintGenerationError("OPENAI_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self.config.openai_api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.config.openai_model,
            "messages": [
                {"role": "system", "content": "You write short hints for quiz questions and reply in JSON."},
                {"role": "user", "content": build_prompt(questions)},
            ],
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.openai_timeout, transport=self.transport) as client:
                resp = await client.post(
                    f"{self.config.openai_base_url.rstrip('/')}/chat/completions",
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.error("Hint request failed for %s questions: %s", len(questions), exc)
            raise HintGenerationError(f"Hint service unavailable: {exc}") from exc

        if resp.status_code != 200:
            logger.warning("Hint generation failed status: %s body: %s", resp.status_code, resp.text)
            raise HintGenerationError(f"Hint service returned status {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise HintGenerationError("Hint service returned an unexpected payload") from exc
        if not isinstance(content, str):
            raise HintGenerationError("Hint service returned an unexpected payload")

        hints = parse_hints(content, len(questions))
        logger.info("Generated %s hints model=%s", len(hints), self.config.openai_model)
        return hints
