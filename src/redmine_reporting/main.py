# src/redmine_reporting/main.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from .config import Settings
from .errors import ConfigurationError, UpstreamError
from .logging_setup import setup_logging_from_env
from .updates import find_todays_updates
from .users import fetch_staff_profiles

log = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(args.env_file)


def cmd_updates(args: argparse.Namespace) -> int:
    settings = _settings(args)
    user_id = args.user_id
    if user_id is None:
        raw = os.getenv("DEFAULT_TARGET_USER_ID")
        if not raw:
            raise ConfigurationError("Pass --user-id or set DEFAULT_TARGET_USER_ID")
        user_id = int(raw)

    issues = asyncio.run(find_todays_updates(settings, user_id, args.project_id))
    if args.print_json:
        print(json.dumps([i.to_dict() for i in issues], ensure_ascii=False, indent=2))
        return 0

    print(f"Found {len(issues)} issues updated today by user {user_id}")
    for i in issues:
        status = (i.status or {}).get("name")
        print(f"#{i.id} [{i.project_name}] [{status}] {i.subject} ({i.url})")
    return 0


def cmd_users(args: argparse.Namespace) -> int:
    settings = _settings(args)
    users = asyncio.run(fetch_staff_profiles(settings))
    if args.print_json:
        print(json.dumps([u.to_dict() for u in users], ensure_ascii=False, indent=2))
        return 0

    print(f"Fetched {len(users)} users")
    for u in users:
        print(f"  - ID: {u.id}, name: {u.lastname} {u.firstname}, login: {u.login}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="redmine-reporting")
    parser.add_argument("--env-file", help="path to a .env file (default: ./.env)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_upd = sub.add_parser("updates", help="issues the given user updated today")
    p_upd.add_argument("--user-id", type=int, help="Redmine user id (default: DEFAULT_TARGET_USER_ID)")
    p_upd.add_argument("--project-id", type=int)
    p_upd.add_argument("--print-json", action="store_true", help="print results as JSON")
    p_upd.set_defaults(func=cmd_updates)

    p_usr = sub.add_parser("users", help="profiles of the users in STAFF_USER_IDS")
    p_usr.add_argument("--print-json", action="store_true", help="print results as JSON")
    p_usr.set_defaults(func=cmd_users)

    args = parser.parse_args(argv)
    setup_logging_from_env()
    try:
        return args.func(args)
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return 2
    except UpstreamError as e:
        log.error("Redmine request failed: %s", e, extra={"status_code": e.status_code})
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
