"""
"Which issues did user X touch today?"

Lists every issue updated within the current local day, pulls the journal
history of each one through a small worker pool, and keeps the issues that
have a journal entry written by the target user today.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .parse import IssueResult, JournalEntry, issue_result, parse_journals, parse_ts
from .pool import run_bounded
from .redmine_api import RedmineClient

log = logging.getLogger(__name__)

# sorts issues without a usable updated_on after everything else
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class DateWindow:
    today: date
    tomorrow: date
    # None means the machine's local zone rules, DST included
    tz: Optional[tzinfo] = None

    @property
    def updated_on(self) -> str:
        """Redmine range filter: ><from|to"""
        return f"><{self.today.isoformat()}|{self.tomorrow.isoformat()}"


@dataclass(frozen=True)
class UpdatesReport:
    window: DateWindow
    issues: List[IssueResult] = field(default_factory=list)
    listed: int = 0
    dropped: int = 0


def today_window(now: Optional[datetime] = None) -> DateWindow:
    """
    Today and tomorrow as local calendar dates. A naive ``now`` is taken as local
    time; an aware one pins journal dates to its own zone.
    """
    if now is None:
        now = datetime.now()
    today = now.date()
    return DateWindow(today=today, tomorrow=today + timedelta(days=1), tz=now.tzinfo)


def journal_local_date(created_on: Optional[str], tz: Optional[tzinfo] = None) -> Optional[date]:
    dt = parse_ts(created_on)
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(tz).date()


def is_hit(entry: JournalEntry, target_user_id: int, window: DateWindow) -> bool:
    if entry.user_id is None or not entry.created_on:
        return False
    if entry.user_id != int(target_user_id):
        return False
    return journal_local_date(entry.created_on, window.tz) == window.today


def _updated_key(result: IssueResult) -> datetime:
    dt = parse_ts(result.updated_on)
    if dt is None:
        return _OLDEST
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def sort_by_updated(results: List[IssueResult]) -> List[IssueResult]:
    """Most recently updated first. Equal timestamps keep their incoming order."""
    return sorted(results, key=_updated_key, reverse=True)


class TodaysUpdatesFetcher:
    def __init__(self, api: RedmineClient, concurrency: Optional[int] = None) -> None:
        self.api = api
        self.concurrency = concurrency if concurrency is not None else api.settings.concurrency

    async def collect(
        self,
        target_user_id: int,
        project_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> UpdatesReport:
        window = today_window(now)
        target = int(target_user_id)

        # a failing page aborts everything, there is no partial list
        listed = await self.api.list_issues(updated_on=window.updated_on, project_id=project_id)
        log.info(
            "Issues updated today",
            extra={"count": len(listed), "range": window.updated_on, "project_id": project_id},
        )

        async def check(summary: Dict[str, Any]) -> Optional[IssueResult]:
            detail = await self.api.get_issue(summary["id"])
            if any(is_hit(j, target, window) for j in parse_journals(detail)):
                return issue_result(detail, self.api.issue_url(detail["id"]))
            return None

        outcomes = await run_bounded(listed, check, self.concurrency)

        hits: List[IssueResult] = []
        dropped = 0
        for outcome in outcomes:
            if not outcome.ok:
                dropped += 1
                log.warning(
                    "Dropping issue, detail fetch failed",
                    extra={"issue_id": (outcome.item or {}).get("id"), "error": str(outcome.error)},
                )
                continue
            if outcome.value is not None:
                hits.append(outcome.value)

        issues = sort_by_updated(hits)
        log.info(
            "Today's updates collected",
            extra={"user_id": target, "listed": len(listed), "matched": len(issues), "dropped": dropped},
        )
        return UpdatesReport(window=window, issues=issues, listed=len(listed), dropped=dropped)

    async def find(
        self,
        target_user_id: int,
        project_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[IssueResult]:
        report = await self.collect(target_user_id, project_id, now=now)
        return report.issues


async def find_todays_updates(
    settings: Settings,
    target_user_id: int,
    project_id: Optional[int] = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    now: Optional[datetime] = None,
) -> List[IssueResult]:
    async with RedmineClient(settings, transport=transport) as api:
        return await TodaysUpdatesFetcher(api).find(target_user_id, project_id, now=now)


__all__ = [
    "DateWindow",
    "UpdatesReport",
    "TodaysUpdatesFetcher",
    "find_todays_updates",
    "today_window",
    "journal_local_date",
    "is_hit",
    "sort_by_updated",
]
