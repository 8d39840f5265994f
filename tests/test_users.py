from __future__ import annotations
import asyncio
from dataclasses import replace

import httpx
import pytest

from redmine_reporting.config import Settings, parse_user_ids
from redmine_reporting.errors import ConfigurationError
from redmine_reporting.parse import UserProfile
from redmine_reporting.redmine_api import RedmineClient
from redmine_reporting.users import UserDirectoryFetcher, fetch_staff_profiles

USERS = {
    "1": {"id": 1, "firstname": "Taro", "lastname": "Yamada", "login": "tyamada", "mail": "t@example.com"},
    "3": {"id": 3, "login": "bot"},
}


def make_settings(staff: str = "") -> Settings:
    return Settings(base_url="https://redmine.local", api_key="t", staff_user_ids=parse_user_ids(staff))


def fake_redmine(seen=None, broken=(), empty=()):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request.url.path)
        user_id = request.url.path.removeprefix("/users/").removesuffix(".json")
        if user_id in broken:
            raise httpx.ConnectError("connection refused", request=request)
        if user_id in empty:
            return httpx.Response(200, content=b"")
        if user_id in USERS:
            return httpx.Response(200, json={"user": USERS[user_id]})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def fetch(user_ids, transport):
    async def go():
        async with RedmineClient(make_settings(), transport=transport) as api:
            return await UserDirectoryFetcher(api).fetch_profiles(user_ids)
    return asyncio.run(go())


def test_staff_ids_with_trailing_comma_and_one_failure():
    seen: list[str] = []
    settings = make_settings("1, 2, ")
    assert settings.staff_user_ids == ("1", "2")

    profiles = asyncio.run(fetch_staff_profiles(settings, transport=fake_redmine(seen, broken={"2"})))

    assert profiles == [UserProfile(id=1, firstname="Taro", lastname="Yamada", login="tyamada")]
    assert sorted(seen) == ["/users/1.json", "/users/2.json"]


def test_profiles_only_project_four_fields():
    [profile] = fetch(["1"], fake_redmine())
    assert profile.to_dict() == {"id": 1, "firstname": "Taro", "lastname": "Yamada", "login": "tyamada"}


def test_missing_names_default_to_empty_string():
    [profile] = fetch("3", fake_redmine())
    assert profile == UserProfile(id=3, firstname="", lastname="", login="bot")


def test_empty_body_and_unknown_users_are_left_out():
    profiles = fetch("1,2,3,404", fake_redmine(empty={"2"}))
    assert [p.id for p in profiles] == [1, 3]


def test_no_ids_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        fetch(" , ", fake_redmine())


def test_missing_staff_ids_fails_before_any_request():
    seen: list[str] = []
    with pytest.raises(ConfigurationError):
        asyncio.run(fetch_staff_profiles(make_settings(""), transport=fake_redmine(seen)))
    assert seen == []


def test_missing_api_key_fails_before_any_request():
    seen: list[str] = []
    settings = replace(make_settings("1"), api_key="")
    with pytest.raises(ConfigurationError):
        asyncio.run(fetch_staff_profiles(settings, transport=fake_redmine(seen)))
    assert seen == []
