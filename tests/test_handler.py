import json

import pytest

import redmine_reporting.handler as h
from redmine_reporting.errors import UpstreamListError
from redmine_reporting.parse import IssueResult, UserProfile


def sample_issue() -> IssueResult:
    return IssueResult(
        id=1,
        subject="Fix login",
        updated_on="2025-11-21T00:40:00Z",
        project={"id": 3, "name": "Website"},
        project_name="Website",
        tracker={"id": 1, "name": "Bug"},
        status={"id": 2, "name": "In Progress"},
        assigned_to=None,
        author={"id": 1, "name": "Admin"},
        url="https://redmine.local/issues/1",
    )


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REDMINE_BASE_URL", "https://redmine.local")
    monkeypatch.setenv("REDMINE_API_KEY", "x")
    monkeypatch.setenv("STAFF_USER_IDS", "1,2")
    return monkeypatch


def test_issues_route(env):
    calls = []

    async def fake_find(settings, user_id, project_id=None):
        calls.append((settings.base_url, user_id, project_id))
        return [sample_issue()]

    env.setattr(h, "find_todays_updates", fake_find)

    res = h.handler({"queryStringParameters": {"user_id": "7", "project_id": "3"}}, None)

    assert res["statusCode"] == 200
    assert res["headers"]["Content-Type"] == "application/json"
    body = json.loads(res["body"])
    assert body[0]["id"] == 1
    assert body[0]["url"] == "https://redmine.local/issues/1"
    assert calls == [("https://redmine.local", 7, 3)]


def test_missing_query_defaults_user_zero(env):
    calls = []

    async def fake_find(settings, user_id, project_id=None):
        calls.append((user_id, project_id))
        return []

    env.setattr(h, "find_todays_updates", fake_find)

    res = h.handler({"queryStringParameters": None}, None)
    assert res["statusCode"] == 200
    assert json.loads(res["body"]) == []
    assert calls == [(0, None)]


def test_non_numeric_user_id_is_rejected(env):
    res = h.handler({"queryStringParameters": {"user_id": "abc"}}, None)
    assert res["statusCode"] == 400
    assert "user_id" in json.loads(res["body"])["error"]


def test_users_route(env):
    async def fake_profiles(settings):
        assert settings.staff_user_ids == ("1", "2")
        return [UserProfile(id=1, firstname="Taro", lastname="Yamada", login="tyamada")]

    env.setattr(h, "fetch_staff_profiles", fake_profiles)

    res = h.handler({"rawPath": "/prod/users/"}, None)
    assert res["statusCode"] == 200
    assert json.loads(res["body"]) == [{"id": 1, "firstname": "Taro", "lastname": "Yamada", "login": "tyamada"}]


def test_upstream_failure_becomes_500(env):
    async def fake_find(settings, user_id, project_id=None):
        raise UpstreamListError("Redmine /issues.json returned 502. Body: bad gateway", status_code=502)

    env.setattr(h, "find_todays_updates", fake_find)

    res = h.handler({"queryStringParameters": {"user_id": "7"}}, None)
    assert res["statusCode"] == 500
    assert json.loads(res["body"]) == {"error": "Redmine /issues.json returned 502. Body: bad gateway"}


def test_missing_configuration_becomes_500(env):
    env.delenv("REDMINE_BASE_URL")
    res = h.handler({"queryStringParameters": {"user_id": "7"}}, None)
    assert res["statusCode"] == 500
    assert "REDMINE_BASE_URL" in json.loads(res["body"])["error"]
