"""Helpers to turn the triggering GitHub event into review inputs."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from ai_code_reviewer.github_client import GitHubAPIError, GitHubClient
from ai_code_reviewer.logger import get_logger, log_timing, log_with_context
from ai_code_reviewer.models.events import PullRequestEvent, ReviewTrigger
from ai_code_reviewer.models.review import PullRequestContext

logger = get_logger()

_TRIGGERS = {
    "opened": ReviewTrigger.FULL,
    "synchronize": ReviewTrigger.INCREMENTAL,
}


class EventPayloadError(RuntimeError):
    """Raised when the event payload is missing, unreadable or incomplete."""


def load_event(event_path: str | Path | None) -> PullRequestEvent:
    if not event_path:
        raise EventPayloadError("GITHUB_EVENT_PATH is not set.")

    path = Path(event_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise EventPayloadError(f"Unable to read event payload at {path}: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EventPayloadError(f"Event payload at {path} is not valid JSON.") from exc

    try:
        return PullRequestEvent.model_validate(payload)
    except ValidationError as exc:
        raise EventPayloadError(
            f"Event payload at {path} is not a pull request event: {exc}"
        ) from exc


def classify_trigger(event: PullRequestEvent) -> ReviewTrigger | None:
    """``opened`` reviews the whole diff, ``synchronize`` only the new commits."""

    return _TRIGGERS.get(event.action or "")


async def build_pull_request_context(
    client: GitHubClient, event: PullRequestEvent
) -> PullRequestContext:
    ctx_logger = log_with_context(logger, repository=f"{event.owner}/{event.repo}")
    try:
        with log_timing(ctx_logger, "fetch_pull_request"):
            pull_request = await client.get_pull_request(event.owner, event.repo, event.number)
    except GitHubAPIError as exc:
        if exc.status_code == 404:
            ctx_logger.error(f"PR or repository not found (404): {exc}")
        elif exc.status_code == 403:
            ctx_logger.error(f"Permission denied (403): {exc}")
        else:
            ctx_logger.error(f"GitHub API error ({exc.status_code}): {exc}")
        raise

    return PullRequestContext(
        owner=event.owner,
        repo=event.repo,
        pull_number=event.number,
        title=pull_request.get("title") or "",
        description=pull_request.get("body") or "",
    )


async def fetch_diff(
    client: GitHubClient,
    event: PullRequestEvent,
    context: PullRequestContext,
    trigger: ReviewTrigger,
) -> str | None:
    """Fetch the diff to review; ``None`` when it is blank."""

    ctx_logger = log_with_context(logger, repository=context.repository, trigger=trigger.value)

    if trigger is ReviewTrigger.FULL:
        ctx_logger.info(f"Fetching full diff for PR #{context.pull_number}")
        with log_timing(ctx_logger, "fetch_pull_request_diff"):
            diff = await client.get_pull_request_diff(context.owner, context.repo, context.pull_number)
    else:
        if not event.before or not event.after:
            raise EventPayloadError("Synchronize event is missing 'before' or 'after' commit sha.")
        ctx_logger.info(f"Fetching incremental diff: base={event.before[:8]}, head={event.after[:8]}")
        with log_timing(ctx_logger, "compare_commits"):
            diff = await client.compare_commits_diff(
                context.owner, context.repo, event.before, event.after
            )

    if not diff.strip():
        return None
    return diff
