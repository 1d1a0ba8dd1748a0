"""LLM client for the Gemini generateContent API with robust JSON extraction."""
import httpx
import json
import re
from typing import Optional, Type, TypeVar
from pydantic import BaseModel
import logging

from config.settings import Settings

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Pre-compiled regex for stripping markdown fences from LLM output
_MD_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


class LLMError(Exception):
    """Base class for language-model backend failures."""


class LLMNotConfiguredError(LLMError):
    """No API key configured; raised before any network access."""


class LLMTimeoutError(LLMError, TimeoutError):
    """The backend did not answer within the per-call timeout."""


class LLMResponseError(LLMError):
    """Non-success status or a reply without generated text."""


def extract_json_object(text: str) -> str:
    """
    Extract the first JSON object from LLM output.

    Handles:
    - Markdown code fences (```json ... ```)
    - Leading/trailing prose around the JSON
    - Multiple JSON objects (takes the first complete one)

    Raises ValueError if no valid JSON object is found.
    """
    fence_match = _MD_FENCE_RE.search(text)
    if fence_match:
        candidate = fence_match.group(1).strip()
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass  # fall through to brace-matching

    # Brace-matching with depth tracking
    depth = 0
    start = None
    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                candidate = text[start : i + 1]
                try:
                    json.loads(candidate)
                    return candidate
                except json.JSONDecodeError:
                    start = None

    raise ValueError("No valid JSON object found in LLM response")


def _candidate_text(data: dict) -> Optional[str]:
    """Generated text lives at candidates[0].content.parts[0].text."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GeminiClient:
    """Thin async wrapper around Gemini ``models/{model}:generateContent``."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = settings.GEMINI_BASE_URL.rstrip("/")
        self.api_key = settings.GEMINI_API_KEY if settings.gemini_configured else None
        self.model = settings.GEMINI_CHAT_MODEL

        # Default timeout; callers pass a per-phase timeout_s
        self.client = httpx.AsyncClient(timeout=30.0, transport=transport)

    @property
    def configured(self) -> bool:
        return self.api_key is not None

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        timeout_s: Optional[float] = None,
        json_mode: bool = False,
    ) -> str:
        """Return the generated text for a single-turn prompt."""
        if not self.api_key:
            raise LLMNotConfiguredError("Gemini API key is not configured")

        model_name = model or self.model
        generation_config: dict = {"temperature": temperature}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/{model_name}:generateContent",
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=timeout_s or 30.0,
            )
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"Gemini request ({model_name}) timed out after {timeout_s}s")
            raise LLMTimeoutError(f"LLM request timed out after {timeout_s}s")
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini returned HTTP {e.response.status_code} ({model_name})")
            raise LLMResponseError(f"LLM call failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini transport error ({model_name}): {e}")
            raise LLMError(f"LLM connection error: {e}") from e

        text = _candidate_text(response.json())
        if not text:
            raise LLMResponseError("LLM response contained no text")
        return text

    async def generate_structured(
        self,
        prompt: str,
        schema: Type[SchemaT],
        model: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> SchemaT:
        """
        Generate a JSON reply and validate it against a Pydantic model.

        Raises LLMError for transport problems, ValueError when no JSON object
        can be found and pydantic.ValidationError when it does not fit.
        """
        response_text = await self.generate(
            prompt=prompt,
            model=model,
            temperature=0.2,
            timeout_s=timeout_s,
            json_mode=True,
        )
        try:
            json_str = extract_json_object(response_text)
            return schema.model_validate_json(json_str)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError too
            logger.error(f"Failed to parse structured LLM output: {e}")
            logger.debug(f"Raw response: {response_text[:500]}")
            raise

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
