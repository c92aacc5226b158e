"""Test configuration."""

from __future__ import annotations

import pytest

from ai_code_reviewer.config import Settings
from ai_code_reviewer.models.review import PullRequestContext


@pytest.fixture
def pr_context() -> PullRequestContext:
    return PullRequestContext(
        owner="octo",
        repo="widgets",
        pull_number=7,
        title="Fix comparison",
        description="Compares a and b before logging.",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        github_token="gh-token",
        openai_api_key="sk-test",
        openai_api_model="gpt-4o-mini",
        bot_name="Reviewer Bot",
    )
