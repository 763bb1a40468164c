from pathlib import Path

import pytest

from rural_explorer.common.errors import SourceNotFoundError
from rural_explorer.common.http import HttpRequestError, RetryableHttpError
from rural_explorer.source.locate import candidate_paths, fetch_remote, locate_local


def test_candidate_paths_follow_template_order():
    assert candidate_paths("Feb012026") == [
        "data/list/Feb012026.xlsx",
        "data/Feb012026.xlsx",
        "Feb012026.xlsx",
    ]


def test_locate_local_returns_first_existing_candidate(tmp_path: Path):
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "Feb012026.xlsx").write_bytes(b"x")
    (tmp_path / "Feb012026.xlsx").write_bytes(b"y")

    assert locate_local("Feb012026", tmp_path) == tmp_path / "data" / "Feb012026.xlsx"


def test_locate_local_lists_every_candidate_when_missing(tmp_path: Path):
    with pytest.raises(SourceNotFoundError) as excinfo:
        locate_local("Feb012026", tmp_path)

    assert excinfo.value.tried == candidate_paths("Feb012026")
    assert "data/list/Feb012026.xlsx" in str(excinfo.value)


class FakeClient:
    def __init__(self, responses: dict):
        self.responses = responses
        self.requested: list[str] = []

    def get_bytes(self, url: str) -> bytes:
        self.requested.append(url)
        outcome = self.responses.get(url)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            raise HttpRequestError("HTTP status: 404", status_code=404)
        return outcome


def test_fetch_remote_falls_through_to_next_candidate():
    client = FakeClient(
        {
            "https://host.test/site/data/list/Feb.xlsx": RetryableHttpError("HTTP status: 503", status_code=503),
            "https://host.test/site/Feb.xlsx": b"PK",
        }
    )

    payload, url = fetch_remote("Feb", "https://host.test/site/", client)

    assert payload == b"PK"
    assert url == "https://host.test/site/Feb.xlsx"
    assert client.requested == [
        "https://host.test/site/data/list/Feb.xlsx",
        "https://host.test/site/data/Feb.xlsx",
        "https://host.test/site/Feb.xlsx",
    ]


def test_fetch_remote_raises_when_all_candidates_fail():
    with pytest.raises(SourceNotFoundError):
        fetch_remote("Feb", "https://host.test", FakeClient({}))
