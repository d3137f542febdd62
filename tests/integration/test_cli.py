import json
from contextlib import contextmanager
from pathlib import Path

from typer.testing import CliRunner

from repomanifest import cli
from repomanifest.manifest import CandidateRepo
from repomanifest.version import get_version

runner = CliRunner()


class StaticSource:
    def __init__(self, *names: str) -> None:
        self.repos = [CandidateRepo(name) for name in names]

    def list_candidates(self, repo_type, include_archived=False):
        return list(self.repos)


def _use_source(monkeypatch, source, seen=None) -> None:
    @contextmanager
    def fake_open_source(org, cache_path):
        if seen is not None:
            seen.append((org, cache_path))
        yield source

    monkeypatch.setattr(cli, "_open_source", fake_open_source)


def _manifest(tmp_path: Path, document: dict) -> Path:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_update_manifest_with_nothing_to_do(tmp_path, monkeypatch) -> None:
    seen = []
    _use_source(monkeypatch, StaticSource("a"), seen)
    path = _manifest(
        tmp_path,
        {"repoCandidateSearch": {"type": "public"}, "repositories": [{"name": "a"}]},
    )

    result = runner.invoke(
        cli.app, ["update-manifest", str(path), "--org", "joyent", "--candidate-cache", str(tmp_path / "c.json")]
    )

    assert result.exit_code == 0, result.output
    assert "No newly archived repos to remove from the manifest." in result.output
    assert "removed=0 included=0 excluded=0 deferred=0" in result.output
    assert seen == [("joyent", tmp_path / "c.json")]


def test_unreadable_manifest_exits_non_zero(tmp_path, monkeypatch) -> None:
    _use_source(monkeypatch, StaticSource("a"))
    result = runner.invoke(cli.app, ["update-manifest", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "error: could not read manifest" in result.output


def test_missing_search_type_exits_with_config_status(tmp_path, monkeypatch) -> None:
    _use_source(monkeypatch, StaticSource("a"))
    path = _manifest(tmp_path, {"repositories": []})
    result = runner.invoke(cli.app, ["update-manifest", str(path)])
    assert result.exit_code == 2
    assert "repoCandidateSearch.type" in result.output


def test_version_command() -> None:
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == get_version()
