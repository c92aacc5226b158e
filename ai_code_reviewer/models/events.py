"""Data models for the GitHub event payload that triggers a review."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RepositoryOwner(BaseModel):
    login: str


class RepositoryInfo(BaseModel):
    name: str
    owner: RepositoryOwner
    full_name: str | None = None


class PullRequestInfo(BaseModel):
    number: int | None = None
    title: str | None = None
    body: str | None = None


class PullRequestEvent(BaseModel):
    action: str | None = None
    number: int
    repository: RepositoryInfo
    before: str | None = None
    after: str | None = None
    pull_request: PullRequestInfo = Field(default_factory=PullRequestInfo)

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name


class ReviewTrigger(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"
