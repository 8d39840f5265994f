# src/redmine_reporting/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import httpx
from dotenv import load_dotenv, find_dotenv

from .errors import ConfigurationError

API_KEY_HEADER = "X-Redmine-API-Key"


def parse_user_ids(raw: Optional[str | int | Iterable[str | int]]) -> tuple[str, ...]:
    """'1, 2, ' -> ('1', '2'). Accepts a comma separated string or an already split list."""
    if raw is None:
        return ()
    if isinstance(raw, (str, int)):
        parts = str(raw).split(",")
    else:
        parts = [str(p) for p in raw]
    return tuple(p.strip() for p in parts if p.strip())


def _load_env_file(env_path: Optional[str | Path]) -> list[Path]:
    tried: list[Path] = []
    candidates: list[Path] = []
    if env_path:
        candidates.append(Path(env_path))
    candidates.append(Path.cwd() / ".env")
    candidates.append(Path(__file__).resolve().parents[2] / ".env")
    for p in candidates:
        tried.append(p)
        if p.is_file():
            load_dotenv(p, override=False)
            return tried
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(found, override=False)
    return tried


@dataclass(frozen=True)
class Settings:
    base_url: str
    api_key: str
    basic_user: Optional[str] = None
    basic_password: Optional[str] = None
    staff_user_ids: tuple[str, ...] = ()
    timeout_s: float = 20.0
    page_size: int = 100
    concurrency: int = 5

    @classmethod
    def from_env(cls, env_path: Optional[str | Path] = None) -> "Settings":
        # real env vars win over the .env file
        tried = _load_env_file(env_path)

        base_url = os.getenv("REDMINE_BASE_URL")
        api_key = os.getenv("REDMINE_API_KEY")

        missing = []
        if not base_url:
            missing.append("REDMINE_BASE_URL")
        if not api_key:
            missing.append("REDMINE_API_KEY")
        if missing:
            tried_str = ", ".join(str(t) for t in tried)
            raise ConfigurationError(
                f"Missing required env var(s): {', '.join(missing)} (tried: {tried_str or 'n/a'})"
            )

        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            basic_user=os.getenv("BASIC_USER") or None,
            basic_password=os.getenv("BASIC_PASSWORD") or None,
            staff_user_ids=parse_user_ids(os.getenv("STAFF_USER_IDS")),
            timeout_s=float(os.getenv("REDMINE_TIMEOUT_S") or 20.0),
            page_size=int(os.getenv("REDMINE_PAGE_SIZE") or 100),
            concurrency=int(os.getenv("REDMINE_CONCURRENCY") or 5),
        )

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def use_basic_auth(self) -> bool:
        return bool(self.basic_user and self.basic_password)

    def validate(self) -> None:
        missing = []
        if not self.root_url:
            missing.append("base_url")
        if not self.api_key:
            missing.append("api_key")
        if missing:
            raise ConfigurationError(f"Missing required setting(s): {', '.join(missing)}")

    def build_client(self, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
        self.validate()
        headers = {API_KEY_HEADER: self.api_key, "Accept": "application/json"}
        auth = (self.basic_user, self.basic_password) if self.use_basic_auth else None
        return httpx.AsyncClient(
            base_url=self.root_url,
            headers=headers,
            auth=auth,
            timeout=httpx.Timeout(self.timeout_s),
            transport=transport,
        )
