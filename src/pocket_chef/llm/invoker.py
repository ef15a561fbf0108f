"""Schema-constrained model invocation.

The flows reach a generative model through a single-method interface,
``ModelBackend.generate(prompt, schema, temperature)``, injected per call.
``GeminiBackend`` is the production implementation; tests inject a fake.

``invoke()`` owns the contract between the two:
- Calls the backend exactly once (no retries)
- Parses the payload leniently (direct JSON, then the first ``{...}`` block)
- Validates it against the flow's response schema
- Raises GenerationFailure for backend errors, empty or non-conforming output
"""

import asyncio
import json
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Optional, TypeVar, Union

from google import genai
from google.genai import types
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pocket_chef.errors import GenerationFailure, safe_execute_sync
from pocket_chef.utils.config import config
from pocket_chef.utils.logger import logger

SchemaT = TypeVar("SchemaT", bound=BaseModel)

RawOutput = Union[str, dict, BaseModel, None]


class ModelBackend(ABC):
    """A generative service able to answer a prompt in a given JSON shape."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        schema: type[BaseModel],
        temperature: Optional[float] = None,
    ) -> RawOutput:
        """Answer ``prompt`` with output shaped like ``schema``.

        Args:
            prompt: Rendered prompt text.
            schema: Response contract the output should follow.
            temperature: Sampling temperature, or None for the backend default.

        Returns:
            JSON text, an already decoded dict, a ``schema`` instance, or None
            when the model produced nothing.
        """


class GeminiBackend(ModelBackend):
    """Google Gemini backend using constrained JSON decoding."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Create the backend.

        Args:
            api_key: Gemini API key. Default: config.GEMINI_API_KEY.
            model: Model id. Default: config.GEMINI_MODEL.
            max_output_tokens: Response cap. Default: config.MAX_OUTPUT_TOKENS.
            client: Pre-built client (skips key validation).

        Raises:
            ValueError: If no client is given and no API key is configured.
        """
        self.model = model or config.GEMINI_MODEL
        self.max_output_tokens = max_output_tokens or config.MAX_OUTPUT_TOKENS
        if client is None:
            api_key = api_key or config.GEMINI_API_KEY
            if not api_key:
                config.validate_credentials()
            client = genai.Client(api_key=api_key)
        self.client = client

    async def generate(
        self,
        prompt: str,
        schema: type[BaseModel],
        temperature: Optional[float] = None,
    ) -> RawOutput:
        generation_config = types.GenerateContentConfig(
            temperature=config.TEMPERATURE if temperature is None else temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
            response_schema=schema,
        )
        # The sync client is used from a worker thread to keep the event loop free
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=prompt,
            config=generation_config,
        )
        return response.text


@lru_cache(maxsize=1)
def get_default_backend() -> ModelBackend:
    """Build the shared Gemini backend on first use."""
    logger.info(f"Initializing Gemini backend (model={config.GEMINI_MODEL})")
    return GeminiBackend()


def parse_model_response(response_text: Optional[str]) -> Optional[dict]:
    """Decode a JSON object from model output text.

    Tries the whole text first, then the outermost ``{...}`` block, for
    models that wrap JSON in prose or code fences.

    Returns:
        The decoded dict, or None if no JSON object could be found.
    """
    if not response_text or not response_text.strip():
        return None

    def _parse_json_direct():
        return json.loads(response_text)

    def _parse_json_regex():
        json_match = re.search(r"\{.*\}", response_text, re.DOTALL)
        if json_match:
            return json.loads(json_match.group())
        return None

    parsed = safe_execute_sync(_parse_json_direct, "Direct JSON parse", log_level="debug")
    if not isinstance(parsed, dict):
        parsed = safe_execute_sync(_parse_json_regex, "Regex JSON extraction", log_level="debug")

    if not isinstance(parsed, dict):
        logger.warning("Failed to parse JSON object from model response")
        return None
    return parsed


async def invoke(
    backend: ModelBackend,
    prompt: str,
    schema: type[SchemaT],
    temperature: Optional[float] = None,
) -> SchemaT:
    """Send ``prompt`` to ``backend`` and return its output validated as ``schema``.

    Args:
        backend: Model backend to call (once).
        prompt: Rendered prompt text.
        schema: Response contract to validate against.
        temperature: Fixed per-flow temperature, or None for the default.

    Returns:
        A ``schema`` instance.

    Raises:
        GenerationFailure: The backend raised, returned nothing, returned
            something that is not a JSON object, or returned an object that
            does not match ``schema``.
    """
    try:
        raw: Any = await backend.generate(prompt, schema, temperature)
    except GenerationFailure:
        raise
    except Exception as e:
        logger.error(f"Model backend call failed for {schema.__name__}: {e}")
        raise GenerationFailure(f"Model backend call failed: {e}") from e

    if isinstance(raw, schema):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)

    if not raw or (isinstance(raw, str) and not raw.strip()):
        raise GenerationFailure(
            f"Model returned no output for {schema.__name__}",
            reason=GenerationFailure.NO_OUTPUT,
        )

    payload = raw if isinstance(raw, dict) else parse_model_response(raw) if isinstance(raw, str) else None
    if payload is None:
        raise GenerationFailure(
            f"Model output for {schema.__name__} is not a JSON object",
            reason=GenerationFailure.INVALID_OUTPUT,
            raw_output=str(raw),
        )

    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"Model output does not match {schema.__name__}: {e.error_count()} error(s)")
        raise GenerationFailure(
            f"Model output does not match {schema.__name__}: {e.errors()[0]['msg']}",
            reason=GenerationFailure.INVALID_OUTPUT,
            raw_output=json.dumps(payload, ensure_ascii=False),
        ) from e
