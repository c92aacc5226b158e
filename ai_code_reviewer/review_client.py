"""Client wrapper for the review model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final, Mapping

from openai import AsyncOpenAI, OpenAIError

from ai_code_reviewer.config import Settings
from ai_code_reviewer.logger import get_logger, log_failure, log_timing, log_with_context

logger = get_logger()


class ReviewClientError(RuntimeError):
    """Raised when the review model returns no usable content."""


class ResponseFormat(str, Enum):
    JSON_OBJECT = "json_object"
    TEXT = "text"


# Models known to accept response_format={"type": "json_object"}.
# https://platform.openai.com/docs/guides/text-generation/json-mode
RESPONSE_FORMAT_CAPABILITIES: Final[Mapping[str, ResponseFormat]] = {
    "gpt-4-turbo": ResponseFormat.JSON_OBJECT,
    "gpt-3.5-turbo": ResponseFormat.JSON_OBJECT,
    "gpt-4o": ResponseFormat.JSON_OBJECT,
}


def classify_response_format(model: str) -> ResponseFormat:
    """Return the strictest response format the model is known to support.

    A known prefix may appear anywhere in the identifier so fine-tuned ids
    (``ft:gpt-4o-mini:org::abc``) inherit their base model's capability.
    """

    for prefix, response_format in RESPONSE_FORMAT_CAPABILITIES.items():
        if prefix in model:
            return response_format
    return ResponseFormat.TEXT


@dataclass(frozen=True, slots=True)
class SamplingConfig:
    temperature: float = 0.2
    max_tokens: int = 1000
    top_p: float = 1
    frequency_penalty: float = 0
    presence_penalty: float = 0


DEFAULT_SAMPLING: Final[SamplingConfig] = SamplingConfig()


def build_request(prompt: str, model: str, sampling: SamplingConfig = DEFAULT_SAMPLING) -> Dict[str, Any]:
    """Build the chat completion request for a single prompt."""

    request: Dict[str, Any] = {
        "model": model,
        "temperature": sampling.temperature,
        "max_tokens": sampling.max_tokens,
        "top_p": sampling.top_p,
        "frequency_penalty": sampling.frequency_penalty,
        "presence_penalty": sampling.presence_penalty,
        "messages": [{"role": "system", "content": prompt}],
    }
    if classify_response_format(model) is ResponseFormat.JSON_OBJECT:
        request["response_format"] = {"type": ResponseFormat.JSON_OBJECT.value}
    return request


class ReviewClient:
    """Make exactly one model call per prompt; failures come back as ``None``."""

    def __init__(
        self,
        *,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        sampling: SamplingConfig = DEFAULT_SAMPLING,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._sampling = sampling
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings, *, client: AsyncOpenAI | None = None) -> "ReviewClient":
        credentials = settings.require_credentials()
        return cls(
            model=settings.openai_api_model,
            api_key=credentials.openai_api_key,
            base_url=settings.normalized_openai_base_url,
            client=client,
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str | None:
        """Return the raw reply text, or ``None`` if the call failed or came back empty."""

        ctx_logger = log_with_context(logger, model=self._model)
        request = build_request(prompt, self._model, self._sampling)
        ctx_logger.debug(
            f"Requesting review (prompt_length={len(prompt)}, "
            f"json_mode={'response_format' in request})"
        )

        try:
            with log_timing(ctx_logger, "review_model_call"):
                response = await self._client.chat.completions.create(**request)
                content = _first_message_content(response)
        except (OpenAIError, ReviewClientError) as exc:
            log_failure(logger, "Review model call failed", exc, model=self._model)
            return None
        except Exception as exc:
            log_failure(logger, "Unexpected error from review model", exc, model=self._model)
            logger.exception("Full exception traceback:")
            return None

        ctx_logger.debug(f"Review model replied ({len(content)} characters)")
        return content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.close()


def _first_message_content(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        raise ReviewClientError("Review model returned no choices.")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not content or not content.strip():
        raise ReviewClientError("Review model returned an empty message.")
    return content
