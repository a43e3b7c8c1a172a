# Shared pytest fixtures
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import pandas as pd
import pytest
import responses

from sheetsync.logging.init import reset_logging
from sheetsync.tms.client import TMSClient
from sheetsync.tms.rate_limit import RateLimiter

BASE_URL = "https://tms.test/api/v2"
PROJECT_ID = 42
PROJECT_URL = f"{BASE_URL}/projects/{PROJECT_ID}"


class FakeTMS:
    """In-memory TMS served through ``responses`` callbacks.

    Mirrors the list envelope, the substring ``filter`` on strings, JSON-patch
    updates and per-(string, language) translations.
    """

    def __init__(self, rsps: responses.RequestsMock) -> None:
        self.strings: dict[int, dict[str, Any]] = {}
        self.translations: dict[tuple[int, str], str] = {}
        self.branches: list[dict[str, Any]] = []
        self.fail_identifiers: set[str] = set()
        self.fail_list_strings = False
        self.log: list[tuple[str, str]] = []
        self._next_id = 100

        rsps.add_callback(responses.GET, PROJECT_URL, callback=self._get_project)
        rsps.add_callback(responses.GET, f"{PROJECT_URL}/branches", callback=self._list_branches)
        rsps.add_callback(responses.GET, f"{PROJECT_URL}/strings", callback=self._list_strings)
        rsps.add_callback(responses.POST, f"{PROJECT_URL}/strings", callback=self._create_string)
        rsps.add_callback(
            responses.PATCH, re.compile(rf"{re.escape(PROJECT_URL)}/strings/\d+$"), callback=self._patch_string
        )
        rsps.add_callback(responses.GET, f"{PROJECT_URL}/translations", callback=self._list_translations)

    # helpers -----------------------------------------------------------
    @staticmethod
    def _params(request: Any) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(urlparse(request.url).query).items()}

    @staticmethod
    def _ok(data: Any, status: int = 200) -> tuple[int, dict[str, str], str]:
        if isinstance(data, list):
            body = {"data": [{"data": d} for d in data]}
        else:
            body = {"data": data}
        return status, {"Content-Type": "application/json"}, json.dumps(body)

    def add_string(self, identifier: str, text: str = "", branch_id: int | None = None) -> int:
        sid = self._next_id
        self._next_id += 1
        self.strings[sid] = {
            "id": sid,
            "identifier": identifier,
            "text": text,
            "context": "",
            "maxLength": 0,
            "branchId": branch_id,
        }
        return sid

    def by_identifier(self, identifier: str) -> dict[str, Any] | None:
        for s in self.strings.values():
            if s["identifier"] == identifier:
                return s
        return None

    def translate(self, identifier: str, language_id: str, text: str) -> None:
        s = self.by_identifier(identifier)
        assert s is not None, identifier
        self.translations[(s["id"], language_id)] = text

    def count(self, method: str, suffix: str = "") -> int:
        return sum(1 for m, p in self.log if m == method and p.endswith(suffix))

    # callbacks ---------------------------------------------------------
    def _get_project(self, request: Any):
        self.log.append(("GET", "/project"))
        return self._ok({"id": PROJECT_ID, "name": "Demo Project"})

    def _list_branches(self, request: Any):
        self.log.append(("GET", "/branches"))
        return self._ok(self.branches)

    def _list_strings(self, request: Any):
        self.log.append(("GET", "/strings"))
        if self.fail_list_strings:
            return 500, {}, "boom"
        params = self._params(request)
        items = sorted(self.strings.values(), key=lambda s: s["id"])
        if "branchId" in params:
            items = [s for s in items if s["branchId"] == int(params["branchId"])]
        if "filter" in params:
            needle = params["filter"]
            items = [s for s in items if needle in s["identifier"] or needle in s["text"]]
        offset = int(params.get("offset", 0))
        limit = int(params.get("limit", 25))
        return self._ok(items[offset:offset + limit])

    def _create_string(self, request: Any):
        self.log.append(("POST", "/strings"))
        body = json.loads(request.body)
        if body["identifier"] in self.fail_identifiers:
            return 500, {}, '{"error": "create failed"}'
        sid = self.add_string(body["identifier"], body["text"], body.get("branchId"))
        self.strings[sid]["context"] = body.get("context", "")
        self.strings[sid]["maxLength"] = body.get("maxLength", 0)
        return self._ok(self.strings[sid], status=201)

    def _patch_string(self, request: Any):
        self.log.append(("PATCH", "/strings/id"))
        sid = int(request.url.rsplit("/", 1)[1])
        s = self.strings.get(sid)
        if s is None:
            return 404, {}, '{"error": "not found"}'
        if s["identifier"] in self.fail_identifiers:
            return 500, {}, '{"error": "update failed"}'
        for op in json.loads(request.body):
            s[op["path"].lstrip("/")] = op["value"]
        return self._ok(s)

    def _list_translations(self, request: Any):
        self.log.append(("GET", "/translations"))
        params = self._params(request)
        items = [
            {"id": n, "stringId": sid, "languageId": lang, "text": text}
            for n, ((sid, lang), text) in enumerate(self.translations.items(), start=1)
            if str(sid) == params.get("stringId", str(sid)) and lang == params.get("languageId", lang)
        ]
        return self._ok(items)


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TMS_API_TOKEN", raising=False)
    monkeypatch.delenv("TMS_PROJECT_ID", raising=False)
    monkeypatch.delenv("TMS_BASE_URL", raising=False)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return f"""project_id: {PROJECT_ID}
api_token: secret-token
base_url: {BASE_URL}
workbook: data/strings.xlsx
source_marker: English
page_size: 2
rate_limit:
  item_delay: 0
  group_delay: 0
  group_every: 0
checkpoint_path: .sheetsync/checkpoint.json
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def mocked_responses():
    """Mock requests responses"""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture()
def fake_tms(mocked_responses: responses.RequestsMock) -> FakeTMS:
    return FakeTMS(mocked_responses)


@pytest.fixture()
def client() -> TMSClient:
    return TMSClient(PROJECT_ID, "secret-token", base_url=BASE_URL)


@pytest.fixture()
def no_delay() -> RateLimiter:
    return RateLimiter()


MENU_ROWS: list[list[object]] = [
    ["Notes", None, None, "140 char max", None, "20 CHAR MAX"],
    ["English (US) source", None, None, "Hello", "Welcome back", "OK"],
    ["French", None, None, None, None, None],
    ["German", None, None, None, None, None],
    ["Klingon", None, None, None, None, None],
    [None, None, None, None, None, None],
    ["Trailing notes", None, None, "not a language row", None, None],
]


@pytest.fixture()
def menu_rows() -> list[list[object]]:
    return [list(r) for r in MENU_ROWS]


def _write_xlsx(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook():
    """Create a real .xlsx with the given sheets (no header, no index)."""
    return _write_xlsx


@pytest.fixture()
def workbook(temp_workdir: Path, menu_rows: list[list[object]]) -> Path:
    return _write_xlsx(
        temp_workdir / "data" / "strings.xlsx",
        {
            "Menu": menu_rows,
            "Readme": [["This sheet has no source row"], ["just notes"]],
        },
    )
