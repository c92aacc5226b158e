"""Shared data structures for review processing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True, slots=True)
class PullRequestContext:
    owner: str
    repo: str
    pull_number: int
    title: str = ""
    description: str = ""

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


class Suggestion(BaseModel):
    """One entry of the model's ``reviews`` array, before any validation of the line."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    line_number: str = Field(alias="lineNumber")
    review_comment: str = Field(alias="reviewComment")

    @field_validator("line_number", mode="before")
    @classmethod
    def _stringify_line_number(cls, value: Any) -> Any:
        # Models answer with either "12" or 12; bools are not line numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ReviewPayload(BaseModel):
    reviews: List[Suggestion]


@dataclass(frozen=True, slots=True)
class ReviewComment:
    path: str
    line: int
    body: str

    @property
    def is_postable(self) -> bool:
        return bool(self.path) and self.line > 0

    def to_payload(self) -> Dict[str, Any]:
        return {"path": self.path, "line": self.line, "body": self.body}
