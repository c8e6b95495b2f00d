"""Grammar checking through the upstream completion API.

The proxy owns the contract between the client, this service and the model: it
validates input, builds a fixed prompt, calls the provider and reconciles whatever
comes back into a :class:`GrammarCheckResult`. Output that cannot be parsed is not
an error; the check degrades to "no changes found".
"""

import json
import re
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .auth import mask_username
from .exceptions import ValidationError
from .models import ErrorEntry, GrammarCheckResult
from .providers import LLMProvider

SYSTEM_PROMPT = """You are a grammar and spelling checker. Analyze the provided text and return a JSON response with the following structure:
{
  "correctedText": "the corrected version of the text",
  "errors": [
    {
      "word": "incorrect word",
      "suggestion": "correct word",
      "type": "grammar|spelling",
      "position": "position in text"
    }
  ]
}
Only return the JSON, no additional text."""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_messages(text: str) -> list[dict[str, str]]:
    """Build the chat messages for a grammar check of ``text``."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]


def _load_json_object(content: str | None) -> dict[str, Any] | None:
    """Decode model output into a dict, or None if it is not a JSON object."""
    if not content:
        return None

    content = content.strip()
    fenced = _CODE_FENCE.match(content)
    if fenced:
        content = fenced.group(1)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Error parsing AI response: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"AI response is JSON but not an object: {type(data).__name__}")
        return None
    return data


def _parse_errors(raw: Any) -> list[ErrorEntry]:
    if not isinstance(raw, list):
        return []

    entries = []
    for item in raw:
        try:
            entries.append(ErrorEntry.model_validate(item))
        except PydanticValidationError:
            logger.warning(f"Dropping malformed error entry: {item!r}")
    return entries


def parse_completion(content: str | None, original_text: str) -> GrammarCheckResult:
    """Reconcile raw model output with the fixed result schema.

    Args:
        content: Text of the first completion choice.
        original_text: The text the user asked to check.

    Returns:
        The parsed result, or the fallback result (original text, no errors) when
        the output is not a JSON object.
    """
    data = _load_json_object(content) or {}

    corrected = data.get("correctedText")
    if not isinstance(corrected, str) or not corrected:
        corrected = original_text

    return GrammarCheckResult(
        correctedText=corrected,
        errors=_parse_errors(data.get("errors")),
        originalText=original_text,
    )


class GrammarProxy:
    """Grammar checking service backed by an LLM provider."""

    def __init__(self, llm_provider: LLMProvider) -> None:
        """Initialize with injected dependencies."""
        self.llm_provider = llm_provider

    async def check_grammar(self, username: str, text: str | None) -> GrammarCheckResult:
        """Check ``text`` for grammar and spelling mistakes.

        Raises:
            ValidationError: If the text is missing or blank.
            ProxyError: If the upstream call fails.
        """
        if not text or not text.strip():
            raise ValidationError("Text is required")

        logger.debug("Checking grammar", user=mask_username(username), length=len(text))

        response = await self.llm_provider.complete(build_messages(text))
        result = parse_completion(response.text, text)

        logger.info(
            "Grammar check complete",
            user=mask_username(username),
            errors=len(result.errors),
        )
        return result
