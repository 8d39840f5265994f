from __future__ import annotations
import logging
from typing import Any, AsyncIterator, Iterable, Type

import httpx

from .config import Settings
from .errors import UpstreamDetailError, UpstreamError, UpstreamListError, UpstreamUserError

log = logging.getLogger(__name__)

ISSUES_PATH = "/issues.json"
ISSUE_PATH_TEMPLATE = "/issues/{issue_id}.json"
USER_PATH_TEMPLATE = "/users/{user_id}.json"


class RedmineClient:
    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client or settings.build_client(transport=transport)

    # lifecycle
    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RedmineClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def issue_url(self, issue_id: Any) -> str:
        return f"{self.settings.root_url}/issues/{issue_id}"

    async def _get_json(
        self,
        path: str,
        error_cls: Type[UpstreamError],
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            r = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise error_cls(f"Redmine {path} request failed: {e!r}") from e
        if r.status_code >= 400:
            raise error_cls(
                f"Redmine {path} returned {r.status_code}. Body: {r.text}",
                status_code=r.status_code,
            )
        if not r.content.strip():
            return None
        try:
            return r.json()
        except ValueError as e:
            raise error_cls(f"Redmine {path} returned invalid JSON", status_code=r.status_code) from e

    # API
    async def iter_issues(
        self,
        *,
        updated_on: str | None = None,
        project_id: int | str | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[dict]:
        """
        Streams issues from GET /issues.json page by page.
        Pages are fetched strictly one after another, since the next offset
        depends on what the previous page returned.
        """
        if page_size is None:
            page_size = self.settings.page_size

        offset = 0
        while True:
            params: dict[str, Any] = {"offset": offset, "limit": page_size}
            if updated_on:
                params["updated_on"] = updated_on
            if project_id:
                params["project_id"] = project_id

            data = await self._get_json(ISSUES_PATH, UpstreamListError, params=params) or {}
            if not isinstance(data, dict):
                raise UpstreamListError(f"Redmine {ISSUES_PATH} returned an unexpected payload")
            issues = data.get("issues") or []
            total = data.get("total_count") or 0
            log.debug("Issue page", extra={"offset": offset, "got": len(issues), "total": total})
            for it in issues:
                yield it

            offset += len(issues)
            # an empty page ends the loop even if total_count claims more
            if len(issues) == 0 or offset >= total:
                break

    async def list_issues(self, **kwargs: Any) -> list[dict]:
        return [it async for it in self.iter_issues(**kwargs)]

    async def get_issue(self, issue_id: Any, include: Iterable[str] = ("journals",)) -> dict:
        path = ISSUE_PATH_TEMPLATE.format(issue_id=issue_id)
        params = {"include": ",".join(include)} if include else None
        data = await self._get_json(path, UpstreamDetailError, params=params)
        issue = data.get("issue") if isinstance(data, dict) else None
        if not isinstance(issue, dict):
            raise UpstreamDetailError(f"Redmine {path} returned no issue")
        return issue

    async def get_user(self, user_id: Any) -> dict | None:
        """The user record, or None when Redmine answers with an empty body."""
        path = USER_PATH_TEMPLATE.format(user_id=user_id)
        data = await self._get_json(path, UpstreamUserError)
        user = data.get("user") if isinstance(data, dict) else None
        return user or None


__all__ = [
    "RedmineClient",
    "ISSUES_PATH",
    "ISSUE_PATH_TEMPLATE",
    "USER_PATH_TEMPLATE",
]
