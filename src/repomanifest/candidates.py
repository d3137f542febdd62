"""
Candidate repository sources.

The curation session only needs the names (and archived flags) of the
repositories that *could* belong in a manifest. The default source pages
through a GitHub organisation listing; a JSON file cache can be stacked on
top of any source to avoid hammering the API while iterating locally.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import requests

from .errors import UpstreamError
from .logger import get_logger
from .manifest.models import CandidateRepo
from .settings import settings
from .version import user_agent

log = get_logger(__name__)


class CandidateSource(Protocol):
    """Anything able to list the candidate repositories for a manifest."""

    def list_candidates(
        self, repo_type: str, include_archived: bool = False
    ) -> List[CandidateRepo]:
        ...


def drop_archived(
    repos: List[CandidateRepo], include_archived: bool
) -> List[CandidateRepo]:
    if include_archived:
        return list(repos)
    return [repo for repo in repos if not repo.archived]


class GitHubCandidateSource:
    """Lists an organisation's repositories through the GitHub REST API."""

    def __init__(
        self,
        org: Optional[str] = None,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        per_page: Optional[int] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.org = org or settings.github_org
        self.token = token if token is not None else settings.github_token
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.per_page = per_page or settings.github_per_page
        self.timeout = timeout or settings.github_timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.update(self._default_headers())

    def _default_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent(),
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def __enter__(self) -> "GitHubCandidateSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def list_candidates(
        self, repo_type: str, include_archived: bool = False
    ) -> List[CandidateRepo]:
        url: Optional[str] = f"{self.api_url}/orgs/{self.org}/repos"
        params: Optional[Dict[str, Any]] = {"type": repo_type, "per_page": self.per_page}
        repos: List[CandidateRepo] = []
        page = 0

        while url:
            page += 1
            response = self._get(url, params)
            try:
                payload = response.json()
            except ValueError as exc:
                log.error("github_response_not_json", url=url, status=response.status_code)
                raise UpstreamError(
                    f"unexpected GitHub API response for {url}: not JSON",
                    status=response.status_code,
                ) from exc
            if not isinstance(payload, list):
                raise UpstreamError(
                    f"unexpected GitHub API response for {url}: expected a list",
                    status=response.status_code,
                )
            for item in payload:
                if not isinstance(item, dict) or not item.get("name"):
                    raise UpstreamError(
                        f"unexpected GitHub API response for {url}: "
                        f"entry without a repo name: {item!r}",
                        status=response.status_code,
                    )
                repos.append(CandidateRepo.from_payload(item))
            log.debug("candidate_page_fetched", page=page, count=len(payload))
            # The "next" link already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None

        if not repos:
            raise UpstreamError(
                f'GitHub returned no repositories for org "{self.org}" (type={repo_type})'
            )

        candidates = drop_archived(repos, include_archived)
        log.info(
            "candidates_fetched",
            org=self.org,
            type=repo_type,
            total=len(repos),
            candidates=len(candidates),
        )
        return candidates

    def _get(self, url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            log.error("github_request_failed", url=url, status=status)
            raise UpstreamError(f"error calling GitHub API: {exc}", status=status) from exc
        except requests.RequestException as exc:
            log.error("github_request_failed", url=url, error=str(exc))
            raise UpstreamError(f"error calling GitHub API: {exc}") from exc
        return response


class CandidateCache(Protocol):
    """Storage for a previously fetched candidate listing."""

    def load(self, repo_type: str, include_archived: bool) -> Optional[List[CandidateRepo]]:
        ...

    def store(
        self, repo_type: str, include_archived: bool, repos: List[CandidateRepo]
    ) -> None:
        ...


class JsonFileCandidateCache:
    """Keeps the last listing in a JSON file, keyed by the search parameters."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self, repo_type: str, include_archived: bool) -> Optional[List[CandidateRepo]]:
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("candidate_cache_unreadable", path=str(self.path), error=str(exc))
            return None
        entries = data.get("repos") if isinstance(data, dict) else None
        if not isinstance(entries, list) or not all(
            isinstance(item, dict) and item.get("name") for item in entries
        ):
            log.warning(
                "candidate_cache_unreadable",
                path=str(self.path),
                error="expected an object with a list of named repos",
            )
            return None
        if data.get("type") != repo_type or data.get("includeArchived") != include_archived:
            log.info("candidate_cache_stale", path=str(self.path))
            return None
        repos = [CandidateRepo.from_payload(item) for item in entries]
        log.info("candidate_cache_loaded", path=str(self.path), count=len(repos))
        return repos

    def store(
        self, repo_type: str, include_archived: bool, repos: List[CandidateRepo]
    ) -> None:
        data = {
            "type": repo_type,
            "includeArchived": include_archived,
            "repos": [repo.to_payload() for repo in repos],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        log.info("candidate_cache_stored", path=str(self.path), count=len(repos))


class CachingCandidateSource:
    """Serves listings from a cache, falling back to the wrapped source."""

    def __init__(self, source: CandidateSource, cache: CandidateCache) -> None:
        self.source = source
        self.cache = cache

    def list_candidates(
        self, repo_type: str, include_archived: bool = False
    ) -> List[CandidateRepo]:
        cached = self.cache.load(repo_type, include_archived)
        if cached:
            return cached
        repos = self.source.list_candidates(repo_type, include_archived)
        self.cache.store(repo_type, include_archived, repos)
        return repos
