import pytest

from repomanifest.curation import reconcile
from repomanifest.errors import UpstreamError
from repomanifest.manifest import CandidateRepo, Manifest, RepoEntry


def _manifest(repos, excluded=()) -> Manifest:
    return Manifest(
        repositories=[RepoEntry(name=name) for name in repos],
        excluded_repositories=list(excluded),
    )


def _candidates(*names: str) -> list[CandidateRepo]:
    return [CandidateRepo(name) for name in names]


def test_reconcile_partitions_manifest_and_candidates() -> None:
    manifest = _manifest(["a", "b", "c"], excluded=["x", "y"])
    candidates = _candidates("a", "c", "x", "n1", "n2")

    result = reconcile(manifest, candidates)

    assert [r.name for r in result.gone_repos] == ["b"]
    assert result.gone_excluded == ["y"]
    assert result.new_names == ["n1", "n2"]
    assert result.gone_names == ["b", "y"]

    retained = {r.name for r in result.retained_repos}
    gone = {r.name for r in result.gone_repos}
    assert retained | gone == set(manifest.repository_names())
    assert not retained & gone

    known = {c.name for c in result.known_candidates}
    new = set(result.new_names)
    assert known | new == {c.name for c in candidates}
    assert new == {c.name for c in candidates} - set(manifest.repository_names()) - set(
        manifest.excluded_repositories
    )


def test_reconcile_scenario_single_gone_repo() -> None:
    result = reconcile(_manifest(["a", "b"]), _candidates("a"))
    assert [r.name for r in result.gone_repos] == ["b"]
    assert result.new_repos == []


def test_reconcile_is_deterministic() -> None:
    manifest = _manifest(["b", "a"], excluded=["z"])
    candidates = _candidates("q", "p", "a")
    first = reconcile(manifest, candidates)
    second = reconcile(manifest, candidates)
    assert first.gone_names == second.gone_names
    assert first.new_names == second.new_names == ["q", "p"]


def test_reconcile_ignores_duplicate_candidates() -> None:
    result = reconcile(_manifest([]), _candidates("n", "n"))
    assert result.new_names == ["n"]


def test_reconcile_refuses_empty_candidate_set() -> None:
    with pytest.raises(UpstreamError):
        reconcile(_manifest(["a", "b"]), [])
