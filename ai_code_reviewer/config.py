"""Action configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Final, List

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, BaseModel, Field, ValidationError

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_MODEL: Final[str] = "gpt-4"
DEFAULT_BOT_NAME: Final[str] = "AI Code Reviewer"
DEFAULT_GITHUB_API_URL: Final[str] = "https://api.github.com"


class SettingsError(RuntimeError):
    """Raised when action configuration is invalid or incomplete."""


@dataclass(frozen=True)
class ReviewerCredentials:
    github_token: str
    openai_api_key: str


class Settings(BaseModel):
    """Runtime settings loaded from action inputs and environment variables."""

    github_token: str | None = None
    openai_api_key: str | None = None
    openai_api_model: str = DEFAULT_MODEL
    openai_base_url: AnyHttpUrl | None = None
    github_api_base_url: AnyHttpUrl = DEFAULT_GITHUB_API_URL
    bot_name: str = DEFAULT_BOT_NAME
    bot_instructions: str = ""
    rules: str = ""
    exclude_patterns: List[str] = Field(default_factory=list)
    max_concurrency: int = Field(default=1, ge=1)
    restrict_to_diff: bool = False
    event_path: str | None = None
    event_name: str | None = None

    @property
    def normalized_github_api_base_url(self) -> str:
        """Return the GitHub API base URL without a trailing slash."""
        return str(self.github_api_base_url).rstrip("/")

    @property
    def normalized_openai_base_url(self) -> str | None:
        if self.openai_base_url is None:
            return None
        return str(self.openai_base_url).rstrip("/")

    def require_credentials(self) -> ReviewerCredentials:
        """Ensure API secrets are configured and return them."""

        missing = []
        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")

        if missing:
            missing_vars = ", ".join(missing)
            raise SettingsError(
                "Reviewer is not configured. Missing inputs: "
                f"{missing_vars}."
            )

        return ReviewerCredentials(
            github_token=self.github_token,
            openai_api_key=self.openai_api_key,
        )


_TRUE_VALUES: Final[set[str]] = {"1", "true", "yes", "on"}


def _parse_bool_env(raw_value: str | None, *, default: bool = False) -> bool:
    """Convert an environment variable string to a boolean value."""

    if raw_value is None or not raw_value.strip():
        return default
    return raw_value.strip().lower() in _TRUE_VALUES


def parse_exclude_patterns(raw_value: str | None) -> List[str]:
    """Split the comma-separated ``exclude`` input into trimmed glob patterns.

    Empty entries are kept: an empty pattern only ever matches an empty path.
    """

    return [pattern.strip() for pattern in (raw_value or "").split(",")]


def get_input(name: str) -> str | None:
    """Read an action input, falling back to the bare variable for local runs.

    GitHub exposes ``with:`` inputs as ``INPUT_<NAME>`` with spaces replaced by
    underscores and the name upper-cased.
    """

    key = name.replace(" ", "_").upper()
    value = os.getenv(f"INPUT_{key}")
    if value is None:
        value = os.getenv(key)
    return value


def _build_settings() -> Settings:
    raw_concurrency = get_input("max_concurrency")

    try:
        max_concurrency: int
        if raw_concurrency and raw_concurrency.strip():
            max_concurrency = int(raw_concurrency)
        else:
            max_concurrency = 1

        return Settings(
            github_token=get_input("github_token") or None,
            openai_api_key=get_input("openai_api_key") or None,
            openai_api_model=get_input("openai_api_model") or DEFAULT_MODEL,
            openai_base_url=get_input("openai_base_url") or None,
            github_api_base_url=os.getenv("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            bot_name=get_input("bot_name") or DEFAULT_BOT_NAME,
            bot_instructions=get_input("bot_instructions") or "",
            rules=get_input("rules") or "",
            exclude_patterns=parse_exclude_patterns(get_input("exclude")),
            max_concurrency=max_concurrency,
            restrict_to_diff=_parse_bool_env(get_input("restrict_to_diff"), default=False),
            event_path=os.getenv("GITHUB_EVENT_PATH"),
            event_name=os.getenv("GITHUB_EVENT_NAME"),
        )
    except ValidationError as exc:
        raise SettingsError(f"Invalid action configuration: {exc}") from exc
    except ValueError as exc:
        raise SettingsError("Invalid value for max_concurrency. It must be an integer.") from exc


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return _build_settings()


def get_settings() -> Settings:
    """Retrieve cached action settings."""
    return _cached_settings()


def reset_settings_cache() -> None:
    """Clear the cached settings (primarily for tests)."""
    _cached_settings.cache_clear()
