from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class JournalEntry:
    id: Optional[int]
    user_id: Optional[int]
    user_name: Optional[str]
    created_on: Optional[str]   # raw Redmine timestamp, e.g. "2025-11-21T08:12:32Z"
    details: List[Dict[str, Any]]


@dataclass(frozen=True)
class IssueResult:
    id: int
    subject: Optional[str]
    updated_on: Optional[str]
    project: Optional[Dict[str, Any]]
    project_name: str
    tracker: Optional[Dict[str, Any]]
    status: Optional[Dict[str, Any]]
    assigned_to: Optional[Dict[str, Any]]
    author: Optional[Dict[str, Any]]
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserProfile:
    id: Any
    firstname: str = ""
    lastname: str = ""
    login: str = ""

    @classmethod
    def from_api(cls, user: Dict[str, Any]) -> "UserProfile":
        return cls(
            id=user.get("id"),
            firstname=user.get("firstname") or "",
            lastname=user.get("lastname") or "",
            login=user.get("login") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _get(d: Dict[str, Any], *path: str, default=None):
    cur: Any = d
    for p in path:
        if not isinstance(cur, dict) or p not in cur:
            return default
        cur = cur[p]
    return cur


def parse_ts(s: Optional[str]) -> Optional[datetime]:
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None


def parse_journals(issue: Dict[str, Any]) -> List[JournalEntry]:
    """Journals of an issue detail (include=journals), in the order Redmine returned them."""
    entries = []
    for j in issue.get("journals") or []:
        if not isinstance(j, dict):
            continue
        user_id = _get(j, "user", "id")
        if isinstance(user_id, str) and user_id.isdigit():
            user_id = int(user_id)
        entries.append(
            JournalEntry(
                id=j.get("id"),
                user_id=user_id if isinstance(user_id, int) else None,
                user_name=_get(j, "user", "name"),
                created_on=j.get("created_on"),
                details=list(j.get("details") or []),
            )
        )
    return entries


def issue_result(issue: Dict[str, Any], url: str) -> IssueResult:
    project = issue.get("project")
    return IssueResult(
        id=issue["id"],
        subject=issue.get("subject"),
        updated_on=issue.get("updated_on"),
        project=project,
        project_name=_get(issue, "project", "name") or "",
        tracker=issue.get("tracker"),
        status=issue.get("status"),
        assigned_to=issue.get("assigned_to"),
        author=issue.get("author"),
        url=url,
    )
