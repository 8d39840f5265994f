# Run with:  python -m scripts.preview_users
from __future__ import annotations
import asyncio

from redmine_reporting.config import Settings
from redmine_reporting.users import fetch_staff_profiles


def main() -> int:
    s = Settings.from_env()
    print(f"REDMINE_BASE_URL: {s.base_url}")
    print(f"STAFF_USER_IDS:   {', '.join(s.staff_user_ids) or '(not set)'}")
    print(f"Basic auth:       {'yes' if s.use_basic_auth else 'no'}")

    users = asyncio.run(fetch_staff_profiles(s))
    print(f"{len(users)} users fetched")
    for u in users:
        print(f"  - ID: {u.id}, name: {u.lastname} {u.firstname}, login: {u.login}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
