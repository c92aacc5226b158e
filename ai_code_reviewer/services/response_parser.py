"""Extract the ``reviews`` list from a raw model reply."""

from __future__ import annotations

import json
from typing import Any, List, Literal

from pydantic import ValidationError

from ai_code_reviewer.models.review import ReviewPayload, Suggestion

MalformedKind = Literal["no_json_object", "invalid_json", "schema_mismatch"]


class MalformedResponseError(ValueError):
    """Raised when a model reply does not carry the expected JSON object."""

    def __init__(self, message: str, kind: MalformedKind):
        super().__init__(message)
        self.kind = kind


def _decode_payload(raw_text: str) -> Any:
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError("No JSON object found in model reply.", "no_json_object")

    candidate = raw_text[start:end + 1]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass
    except RecursionError as exc:
        raise MalformedResponseError("Model reply JSON is nested too deeply.", "invalid_json") from exc

    # Trailing prose may itself contain braces; decode the first complete value instead.
    try:
        value, _ = json.JSONDecoder().raw_decode(raw_text, start)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Model reply is not valid JSON: {exc}", "invalid_json") from exc
    except RecursionError as exc:
        raise MalformedResponseError("Model reply JSON is nested too deeply.", "invalid_json") from exc
    return value


def parse_response(raw_text: str) -> List[Suggestion]:
    """Return the suggestions in ``raw_text``, in the order the model gave them.

    Conversational text around the JSON object is tolerated. Anything else
    raises :class:`MalformedResponseError`.
    """

    payload = _decode_payload(raw_text)
    if not isinstance(payload, dict):
        raise MalformedResponseError("Model reply JSON is not an object.", "schema_mismatch")

    try:
        return ReviewPayload.model_validate(payload).reviews
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Model reply does not match the reviews schema: {exc}", "schema_mismatch"
        ) from exc
