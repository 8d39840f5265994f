# Run with:  python -m scripts.preview_updates
from __future__ import annotations
import asyncio
import os

from redmine_reporting.config import Settings
from redmine_reporting.redmine_api import RedmineClient
from redmine_reporting.updates import TodaysUpdatesFetcher


async def run(s: Settings, user_id: int, project_id: int | None) -> int:
    async with RedmineClient(s) as api:
        report = await TodaysUpdatesFetcher(api).collect(user_id, project_id)

    print(f"Range filter: {report.window.updated_on}")
    print(f"Listed {report.listed} issues, {report.dropped} detail fetch(es) failed")
    print(f"Found {len(report.issues)} issues updated today by user {user_id}")
    for i in report.issues:
        status = (i.status or {}).get("name")
        print(f"#{i.id} [{i.project_name}] [{status}] {i.subject} ({i.url})")
    return 0


def main() -> int:
    s = Settings.from_env()
    raw = os.getenv("DEFAULT_TARGET_USER_ID")
    if not raw:
        print("Missing DEFAULT_TARGET_USER_ID (set it in your .env)")
        return 2
    project = os.getenv("DEFAULT_PROJECT_ID")
    return asyncio.run(run(s, int(raw), int(project) if project else None))


if __name__ == "__main__":
    raise SystemExit(main())
