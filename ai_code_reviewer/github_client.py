"""GitHub API client helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable

import httpx


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, status_code: int, response_body: Any | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


DEFAULT_ACCEPT_HEADER = "application/vnd.github+json"
DIFF_ACCEPT_HEADER = "application/vnd.github.v3.diff"
DEFAULT_API_VERSION = "2022-11-28"


class GitHubClient:
    """Token-authenticated helper for the pull request operations a review needs."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        user_agent: str = "AI-Code-Reviewer/1.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={
                "User-Agent": self._user_agent,
                "Accept": DEFAULT_ACCEPT_HEADER,
                "X-GitHub-Api-Version": DEFAULT_API_VERSION,
            },
        )
        self._owns_client = client is None
        self._auth_headers = {
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": DEFAULT_API_VERSION,
        }

    def _headers(self, accept: str = DEFAULT_ACCEPT_HEADER) -> Dict[str, str]:
        return {**self._auth_headers, "Accept": accept}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        accept: str = DEFAULT_ACCEPT_HEADER,
        params: Dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> httpx.Response:
        response = await self._client.request(
            method, url, headers=self._headers(accept), params=params, json=json
        )
        if response.status_code >= 400:
            detail: Any | None
            if response.content:
                try:
                    detail = response.json()
                except ValueError:
                    detail = response.text
            else:
                detail = None
            raise GitHubAPIError(
                f"GitHub API request to {url} failed with status {response.status_code}.",
                response.status_code,
                detail,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                f"GitHub API returned invalid JSON while trying to {action}.",
                response.status_code,
                response.text,
            ) from exc

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> Dict[str, Any]:
        response = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")
        data = self._json(response, "fetch the pull request")
        if not isinstance(data, dict):
            raise GitHubAPIError(
                "Unexpected response while fetching the pull request.",
                response.status_code,
                data,
            )
        return data

    async def get_pull_request_diff(self, owner: str, repo: str, pull_number: int) -> str:
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{pull_number}",
            accept=DIFF_ACCEPT_HEADER,
        )
        return response.text

    async def compare_commits_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            accept=DIFF_ACCEPT_HEADER,
        )
        return response.text

    async def create_pull_request_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        *,
        comments: Iterable[Dict[str, Any]],
        event: str = "COMMENT",
        body: str | None = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"event": event, "comments": list(comments)}
        if body:
            payload["body"] = body
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
            json=payload,
        )
        return self._json(response, "create the review")

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
