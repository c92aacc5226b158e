"""Drive a pull request review from diff text to submitted comments."""

from __future__ import annotations

import asyncio
from typing import List, Sequence, Tuple

from ai_code_reviewer.config import Settings
from ai_code_reviewer.github_client import GitHubClient
from ai_code_reviewer.logger import get_logger, log_failure, log_success, log_timing, log_with_context
from ai_code_reviewer.models.diff import DiffFile, DiffHunk
from ai_code_reviewer.models.events import PullRequestEvent
from ai_code_reviewer.models.review import PullRequestContext, ReviewComment
from ai_code_reviewer.review_client import ReviewClient
from ai_code_reviewer.services.comment_mapper import map_comments
from ai_code_reviewer.services.diff_parser import parse_diff
from ai_code_reviewer.services.path_filter import filter_files
from ai_code_reviewer.services.prompt_builder import PromptOptions, build_prompt
from ai_code_reviewer.services.response_parser import MalformedResponseError, parse_response
from ai_code_reviewer.services.review_context import (
    build_pull_request_context,
    classify_trigger,
    fetch_diff,
)

logger = get_logger()

REVIEW_EVENT = "COMMENT"

_HunkKey = Tuple[int, int]


def filter_postable(comments: Sequence[ReviewComment]) -> List[ReviewComment]:
    """Keep only comments with a path and a positive line."""

    return [comment for comment in comments if comment.is_postable]


class ReviewProcessor:
    def __init__(
        self,
        *,
        github_client: GitHubClient,
        review_client: ReviewClient,
        settings: Settings,
    ) -> None:
        self._github_client = github_client
        self._review_client = review_client
        self._prompt_options = PromptOptions.from_settings(settings)
        self._exclude_patterns = list(settings.exclude_patterns)
        self._max_concurrency = settings.max_concurrency
        self._restrict_to_diff = settings.restrict_to_diff

    async def run(self, event: PullRequestEvent) -> List[ReviewComment]:
        """Review the diff behind ``event`` and submit the comments; returns what was submitted."""

        ctx_logger = log_with_context(
            logger, repository=f"{event.owner}/{event.repo}", pull_number=event.number, action=event.action
        )
        trigger = classify_trigger(event)
        if trigger is None:
            ctx_logger.info(f"Unsupported pull request action: {event.action}")
            return []

        ctx_logger.info(f"=== PROCESSOR: Starting {trigger.value} review ===")
        context = await build_pull_request_context(self._github_client, event)
        diff = await fetch_diff(self._github_client, event, context, trigger)
        if diff is None:
            ctx_logger.info("No diff found or diff is empty")
            return []

        comments = await self.review_diff(diff, context)
        if not comments:
            ctx_logger.info("No valid comments to post")
            return []

        with log_timing(ctx_logger, "submit_review"):
            await self._github_client.create_pull_request_review(
                context.owner,
                context.repo,
                context.pull_number,
                comments=[comment.to_payload() for comment in comments],
                event=REVIEW_EVENT,
            )
        log_success(
            logger,
            f"Posted review with {len(comments)} comment(s) on PR #{context.pull_number}",
            repository=context.repository,
        )
        return comments

    async def review_diff(self, diff_text: str, context: PullRequestContext) -> List[ReviewComment]:
        """Parse, filter and analyze ``diff_text``; returns only postable comments."""

        files = parse_diff(diff_text)
        if files is None:
            logger.info("Diff is empty; nothing to review")
            return []
        if not files:
            logger.warning("Diff text contained no file changes")
            return []

        files = filter_files(files, self._exclude_patterns)
        comments = await self.analyze(files, context)
        postable = filter_postable(comments)
        if len(postable) != len(comments):
            logger.info(f"Dropped {len(comments) - len(postable)} comment(s) without a path or positive line")
        return postable

    async def analyze(self, files: Sequence[DiffFile], context: PullRequestContext) -> List[ReviewComment]:
        """Review every hunk of every reviewable file.

        Comments come back grouped by file order then hunk order regardless of
        how many hunks are in flight.
        """

        work = [
            ((file_index, hunk_index), file, hunk)
            for file_index, file in enumerate(files)
            if file.is_reviewable
            for hunk_index, hunk in enumerate(file.hunks)
        ]
        skipped = sum(1 for file in files if not file.is_reviewable)
        if skipped:
            logger.debug(f"Skipping {skipped} deleted or empty file(s)")
        logger.info(f"Reviewing {len(work)} hunk(s) across {len(files) - skipped} file(s)")

        if self._max_concurrency <= 1:
            results = []
            for key, file, hunk in work:
                results.append((key, await self.review_hunk(file, hunk, context)))
        else:
            semaphore = asyncio.Semaphore(self._max_concurrency)

            async def _bounded(key: _HunkKey, file: DiffFile, hunk: DiffHunk):
                async with semaphore:
                    return key, await self.review_hunk(file, hunk, context)

            results = await asyncio.gather(*(_bounded(key, file, hunk) for key, file, hunk in work))

        comments: List[ReviewComment] = []
        for _, hunk_comments in sorted(results, key=lambda item: item[0]):
            comments.extend(hunk_comments)
        return comments

    async def review_hunk(
        self, file: DiffFile, hunk: DiffHunk, context: PullRequestContext
    ) -> List[ReviewComment]:
        """One model call for one hunk. Failures yield no comments and never raise."""

        try:
            return await self._review_hunk(file, hunk, context)
        except Exception as exc:
            log_failure(logger, "Unexpected error while reviewing hunk", exc, path=file.path, hunk=str(hunk.header))
            return []

    async def _review_hunk(
        self, file: DiffFile, hunk: DiffHunk, context: PullRequestContext
    ) -> List[ReviewComment]:
        ctx_logger = log_with_context(logger, path=file.path, hunk=str(hunk.header))
        prompt = build_prompt(file, hunk, context, self._prompt_options)

        raw_response = await self._review_client.complete(prompt)
        if raw_response is None:
            ctx_logger.warning("No response from review model; skipping hunk")
            return []

        try:
            suggestions = parse_response(raw_response)
        except MalformedResponseError as exc:
            log_failure(
                logger,
                f"Malformed review response ({exc.kind})",
                exc,
                path=file.path,
                hunk=str(hunk.header),
            )
            return []

        ctx_logger.debug(f"Model returned {len(suggestions)} suggestion(s)")
        return map_comments(file, hunk, suggestions, restrict_to_diff=self._restrict_to_diff)
