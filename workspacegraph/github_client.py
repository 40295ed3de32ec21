"""GitHub contents API client - single-attempt requests, no retry."""

import json
import logging
from typing import Any, Optional

import httpx

from . import config
from .error_handling import RemoteRequestError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin async wrapper over the endpoints the repository sync needs."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = config.GITHUB_API,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github.v3+json",
                "Content-Type": "application/json",
            }
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        try:
            error_data = response.json()
        except (json.JSONDecodeError, ValueError):
            return fallback
        if not isinstance(error_data, dict):
            return fallback
        message = error_data.get("message") or fallback
        if "Repository creation failed" in message:
            errors = error_data.get("errors") or []
            detail = errors[0].get("message") if errors and isinstance(errors[0], dict) else None
            return f"Repository creation failed: {detail or 'name collision or invalid scope'}"
        return message

    def _check(self, response: httpx.Response, what: str) -> httpx.Response:
        if response.is_success:
            return response
        message = self._error_message(response, f"status {response.status_code}")
        raise RemoteRequestError(
            f"{what} failed: {message}",
            {"status_code": response.status_code, "target": what, "remote_message": message}
        )

    async def _request(self, method: str, url: str, what: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteRequestError(f"{what} failed: {e}", {"target": what}) from e
        return self._check(response, what)

    @staticmethod
    def _decode(response: httpx.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteRequestError(
                f"{what} failed: invalid response format from API",
                {"status_code": response.status_code, "target": what}
            ) from e

    @staticmethod
    def _malformed(what: str, detail: str) -> RemoteRequestError:
        return RemoteRequestError(f"{what} failed: malformed response ({detail})", {"target": what})

    async def list_contents(self, repo_id: str, path: str = "") -> list[dict[str, Any]]:
        """List a directory (or describe a single file) in a repository."""
        what = f"Path '{path or '/'}'"
        response = await self._request("GET", f"/repos/{repo_id}/contents/{path}", what)
        items = self._decode(response, what)
        items = items if isinstance(items, list) else [items]
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise self._malformed(what, "entry without a path")
            if item.get("type") == "file" and not (item.get("download_url") and item.get("name")):
                raise self._malformed(what, f"file entry '{item['path']}' without name or download_url")
        return items

    async def fetch_raw(self, download_url: str, path: str) -> str:
        response = await self._request("GET", download_url, f"Download of '{path}'")
        return response.text

    async def create_repository(self, name: str, description: str, private: bool = False) -> dict[str, Any]:
        what = f"Creation of repository '{name}'"
        response = await self._request(
            "POST",
            "/user/repos",
            what,
            json={
                "name": name,
                "description": description,
                "private": private,
                "auto_init": False,
            },
        )
        repo_data = self._decode(response, what)
        owner = repo_data.get("owner") if isinstance(repo_data, dict) else None
        if not isinstance(owner, dict) or not isinstance(owner.get("login"), str):
            raise self._malformed(what, "missing owner.login")
        return repo_data

    async def put_file(self, owner: str, repo: str, path: str, content_b64: str, message: str) -> dict[str, Any]:
        what = f"Upload of '{path}'"
        response = await self._request(
            "PUT",
            f"/repos/{owner}/{repo}/contents/{path}",
            what,
            json={"message": message, "content": content_b64},
        )
        return self._decode(response, what)
