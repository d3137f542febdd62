"""
Set differences between a manifest and the live candidate listing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ..errors import UpstreamError
from ..logger import get_logger
from ..manifest.models import CandidateRepo, Manifest, RepoEntry

log = get_logger(__name__)


@dataclass
class Reconciliation:
    """Result of comparing a manifest against the candidate set.

    ``gone_repos`` and ``gone_excluded`` keep manifest order, ``new_repos``
    keeps candidate order.
    """

    gone_repos: List[RepoEntry] = field(default_factory=list)
    gone_excluded: List[str] = field(default_factory=list)
    new_repos: List[CandidateRepo] = field(default_factory=list)
    retained_repos: List[RepoEntry] = field(default_factory=list)
    known_candidates: List[CandidateRepo] = field(default_factory=list)

    @property
    def gone_names(self) -> List[str]:
        return [repo.name for repo in self.gone_repos] + list(self.gone_excluded)

    @property
    def new_names(self) -> List[str]:
        return [repo.name for repo in self.new_repos]


def reconcile(manifest: Manifest, candidates: Sequence[CandidateRepo]) -> Reconciliation:
    """Partition the manifest and the candidates by repository name.

    An empty candidate set is refused: taken at face value it would mark
    every tracked repository as gone.
    """
    if not candidates:
        raise UpstreamError("candidate source returned no repositories")

    candidate_names = {repo.name for repo in candidates}
    tracked_names = set(manifest.repository_names())
    excluded_names = set(manifest.excluded_repositories)

    result = Reconciliation()
    for repo in manifest.repositories:
        if repo.name in candidate_names:
            result.retained_repos.append(repo)
        else:
            result.gone_repos.append(repo)
    result.gone_excluded = [
        name for name in manifest.excluded_repositories if name not in candidate_names
    ]

    seen = set()
    for candidate in candidates:
        if candidate.name in seen:
            continue
        seen.add(candidate.name)
        if candidate.name in tracked_names or candidate.name in excluded_names:
            result.known_candidates.append(candidate)
        else:
            result.new_repos.append(candidate)

    log.info(
        "reconciled",
        candidates=len(seen),
        gone_repos=len(result.gone_repos),
        gone_excluded=len(result.gone_excluded),
        new_repos=len(result.new_repos),
    )
    return result
