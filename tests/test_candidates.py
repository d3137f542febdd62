import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests

from repomanifest.candidates import (
    CachingCandidateSource,
    GitHubCandidateSource,
    JsonFileCandidateCache,
)
from repomanifest.errors import UpstreamError
from repomanifest.manifest import CandidateRepo


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200, next_url: Optional[str] = None) -> None:
        self._payload = payload
        self.status_code = status_code
        self.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}

    def json(self) -> Any:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, responses: List[FakeResponse]) -> None:
        self.responses = list(responses)
        self.headers: Dict[str, str] = {}
        self.requests: List[dict] = []
        self.closed = False

    def get(self, url: str, params=None, timeout=None) -> FakeResponse:
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


def _source(session: FakeSession, token: Optional[str] = "secret") -> GitHubCandidateSource:
    return GitHubCandidateSource(
        org="TritonDataCenter",
        token=token,
        api_url="https://api.example.test/",
        per_page=2,
        timeout=5,
        session=session,
    )


def test_github_source_follows_pagination_and_drops_archived() -> None:
    session = FakeSession(
        [
            FakeResponse(
                [{"name": "a", "archived": False}, {"name": "old", "archived": True}],
                next_url="https://api.example.test/orgs/TritonDataCenter/repos?page=2",
            ),
            FakeResponse([{"name": "b", "archived": False}]),
        ]
    )
    repos = _source(session).list_candidates("public")

    assert [r.name for r in repos] == ["a", "b"]
    first, second = session.requests
    assert first["url"] == "https://api.example.test/orgs/TritonDataCenter/repos"
    assert first["params"] == {"type": "public", "per_page": 2}
    assert second["params"] is None
    assert second["url"].endswith("page=2")
    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["User-Agent"].startswith("repomanifest/")


def test_github_source_keeps_archived_when_asked() -> None:
    session = FakeSession([FakeResponse([{"name": "old", "archived": True}])])
    repos = _source(session, token=None).list_candidates("all", include_archived=True)
    assert repos == [CandidateRepo("old", archived=True)]
    assert "Authorization" not in session.headers


def test_github_source_maps_http_errors() -> None:
    session = FakeSession([FakeResponse({"message": "Bad credentials"}, status_code=401)])
    with pytest.raises(UpstreamError) as excinfo:
        _source(session).list_candidates("public")
    assert excinfo.value.status == 401


def test_github_source_maps_transport_errors() -> None:
    class BrokenSession(FakeSession):
        def get(self, url, params=None, timeout=None):
            raise requests.ConnectionError("connection refused")

    with pytest.raises(UpstreamError) as excinfo:
        _source(BrokenSession([])).list_candidates("public")
    assert excinfo.value.status is None


def test_github_source_rejects_non_json_body() -> None:
    class HtmlResponse(FakeResponse):
        def json(self) -> Any:
            raise requests.JSONDecodeError("Expecting value", "<html>proxy</html>", 0)

    session = FakeSession([HtmlResponse(None)])
    with pytest.raises(UpstreamError) as excinfo:
        _source(session).list_candidates("public")
    assert excinfo.value.status == 200
    assert "not JSON" in str(excinfo.value)


@pytest.mark.parametrize("item", ["just-a-string", {"archived": False}, {"name": ""}])
def test_github_source_rejects_entries_without_name(item) -> None:
    session = FakeSession([FakeResponse([{"name": "a"}, item])])
    with pytest.raises(UpstreamError):
        _source(session).list_candidates("public")


def test_github_source_refuses_empty_listing() -> None:
    with pytest.raises(UpstreamError):
        _source(FakeSession([FakeResponse([])])).list_candidates("public")


def test_github_source_does_not_close_injected_session() -> None:
    session = FakeSession([])
    with _source(session):
        pass
    assert session.closed is False


def test_caching_source_serves_cached_listing(tmp_path: Path) -> None:
    class CountingSource:
        def __init__(self) -> None:
            self.calls = 0

        def list_candidates(self, repo_type, include_archived=False):
            self.calls += 1
            return [CandidateRepo("a"), CandidateRepo("b")]

    inner = CountingSource()
    cache = JsonFileCandidateCache(tmp_path / "cache" / "repos.json")
    source = CachingCandidateSource(inner, cache)

    assert [r.name for r in source.list_candidates("public")] == ["a", "b"]
    assert [r.name for r in source.list_candidates("public")] == ["a", "b"]
    assert inner.calls == 1

    source.list_candidates("all")
    assert inner.calls == 2


class CountingSource:
    def __init__(self) -> None:
        self.calls = 0

    def list_candidates(self, repo_type, include_archived=False):
        self.calls += 1
        return [CandidateRepo("a")]


@pytest.mark.parametrize(
    "content",
    [
        '[{"name": "a", "archived": false}]',
        '{"type": "public", "includeArchived": false, "repos": {"a": 1}}',
        '{"type": "public", "includeArchived": false, "repos": [{"archived": true}]}',
        '"public"',
    ],
)
def test_malformed_cache_falls_back_to_source(tmp_path: Path, content: str) -> None:
    path = tmp_path / "repos.json"
    path.write_text(content, encoding="utf-8")
    cache = JsonFileCandidateCache(path)
    assert cache.load("public", False) is None

    inner = CountingSource()
    repos = CachingCandidateSource(inner, cache).list_candidates("public")

    assert repos == [CandidateRepo("a")]
    assert inner.calls == 1
    assert json.loads(path.read_text(encoding="utf-8"))["repos"] == [
        {"name": "a", "archived": False}
    ]
