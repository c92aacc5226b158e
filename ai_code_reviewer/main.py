"""GitHub Action entrypoint."""

from __future__ import annotations

import asyncio
import sys
from contextlib import AsyncExitStack

from ai_code_reviewer.config import Settings, SettingsError, get_settings
from ai_code_reviewer.github_client import GitHubAPIError, GitHubClient
from ai_code_reviewer.logger import get_logger, log_failure, log_timing
from ai_code_reviewer.review_client import ReviewClient
from ai_code_reviewer.services.diff_parser import DiffParseError
from ai_code_reviewer.services.review_context import EventPayloadError, load_event
from ai_code_reviewer.services.review_processor import ReviewProcessor

logger = get_logger()

SUPPORTED_EVENTS = {"pull_request", "pull_request_target"}


async def run(settings: Settings) -> None:
    """Run one review for the event described by ``settings``."""

    if settings.event_name and settings.event_name not in SUPPORTED_EVENTS:
        logger.info(f"Unsupported event: {settings.event_name}")
        return

    credentials = settings.require_credentials()
    event = load_event(settings.event_path)
    logger.info(
        f"Handling {settings.event_name or 'pull_request'} event "
        f"(action={event.action}) for {event.owner}/{event.repo}#{event.number}"
    )

    async with AsyncExitStack() as stack:
        github_client = GitHubClient(
            base_url=settings.normalized_github_api_base_url,
            token=credentials.github_token,
        )
        stack.push_async_callback(github_client.aclose)
        review_client = ReviewClient.from_settings(settings)
        stack.push_async_callback(review_client.aclose)

        processor = ReviewProcessor(
            github_client=github_client,
            review_client=review_client,
            settings=settings,
        )
        with log_timing(logger, "review_pull_request"):
            await processor.run(event)


def main() -> int:
    try:
        settings = get_settings()
        asyncio.run(run(settings))
    except (SettingsError, EventPayloadError) as exc:
        log_failure(logger, "Unable to start review", exc)
        return 1
    except (GitHubAPIError, DiffParseError) as exc:
        log_failure(logger, "Review aborted", exc)
        return 1
    except Exception as exc:
        log_failure(logger, "Unhandled error during review", exc)
        logger.exception("Full exception traceback:")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
