"""Tests for ai_code_reviewer.services.review_context."""

import asyncio
import json

import httpx
import pytest

from ai_code_reviewer.github_client import GitHubAPIError, GitHubClient
from ai_code_reviewer.models.events import PullRequestEvent, ReviewTrigger
from ai_code_reviewer.models.review import PullRequestContext
from ai_code_reviewer.services.review_context import (
    EventPayloadError,
    build_pull_request_context,
    classify_trigger,
    fetch_diff,
    load_event,
)

EVENT = {
    "action": "synchronize",
    "number": 5,
    "before": "1111111111",
    "after": "2222222222",
    "repository": {"name": "widgets", "full_name": "octo/widgets", "owner": {"login": "octo"}},
    "pull_request": {"number": 5, "title": "Title", "body": "Body"},
}


def _github(handler):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://api.github.com"
    )
    return GitHubClient(base_url="https://api.github.com", token="t", client=http_client)


@pytest.fixture
def event_file(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps(EVENT), encoding="utf-8")
    return path


class TestLoadEvent:
    def test_loads_pull_request_event(self, event_file):
        event = load_event(event_file)

        assert (event.owner, event.repo, event.number, event.action) == ("octo", "widgets", 5, "synchronize")
        assert event.before == "1111111111"

    def test_missing_path(self):
        with pytest.raises(EventPayloadError):
            load_event(None)

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(EventPayloadError):
            load_event(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(EventPayloadError):
            load_event(path)

    def test_payload_without_repository(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text(json.dumps({"action": "opened", "number": 1}), encoding="utf-8")

        with pytest.raises(EventPayloadError):
            load_event(path)


class TestClassifyTrigger:
    @pytest.mark.parametrize(
        ("action", "expected"),
        [
            ("opened", ReviewTrigger.FULL),
            ("synchronize", ReviewTrigger.INCREMENTAL),
            ("reopened", None),
            ("closed", None),
            (None, None),
        ],
    )
    def test_only_opened_and_synchronize_trigger(self, action, expected):
        event = PullRequestEvent.model_validate({**EVENT, "action": action})

        assert classify_trigger(event) is expected


class TestBuildContext:
    def test_copies_title_and_description(self):
        def handler(request):
            return httpx.Response(200, json={"title": "Add parser", "body": None})

        event = PullRequestEvent.model_validate(EVENT)
        context = asyncio.run(build_pull_request_context(_github(handler), event))

        assert context == PullRequestContext(
            owner="octo", repo="widgets", pull_number=5, title="Add parser", description=""
        )

    def test_api_errors_propagate(self):
        def handler(request):
            return httpx.Response(403, json={"message": "Forbidden"})

        event = PullRequestEvent.model_validate(EVENT)
        with pytest.raises(GitHubAPIError):
            asyncio.run(build_pull_request_context(_github(handler), event))


class TestFetchDiff:
    CONTEXT = PullRequestContext(owner="octo", repo="widgets", pull_number=5)

    def test_full_trigger_fetches_pull_request_diff(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, text="diff text\n")

        event = PullRequestEvent.model_validate(EVENT)
        diff = asyncio.run(fetch_diff(_github(handler), event, self.CONTEXT, ReviewTrigger.FULL))

        assert diff == "diff text\n"
        assert paths == ["/repos/octo/widgets/pulls/5"]

    def test_incremental_trigger_compares_before_and_after(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, text="diff text\n")

        event = PullRequestEvent.model_validate(EVENT)
        asyncio.run(fetch_diff(_github(handler), event, self.CONTEXT, ReviewTrigger.INCREMENTAL))

        assert paths == ["/repos/octo/widgets/compare/1111111111...2222222222"]

    def test_blank_diff_is_none(self):
        event = PullRequestEvent.model_validate(EVENT)
        client = _github(lambda request: httpx.Response(200, text=" \n"))

        assert asyncio.run(fetch_diff(client, event, self.CONTEXT, ReviewTrigger.FULL)) is None

    def test_incremental_without_shas_raises(self):
        event = PullRequestEvent.model_validate({**EVENT, "before": None})
        client = _github(lambda request: httpx.Response(200, text="x"))

        with pytest.raises(EventPayloadError):
            asyncio.run(fetch_diff(client, event, self.CONTEXT, ReviewTrigger.INCREMENTAL))
