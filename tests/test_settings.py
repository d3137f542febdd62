from pathlib import Path

from repomanifest.settings import AppSettings, _flatten_config, load_settings


def test_flatten_config_maps_toml_sections() -> None:
    raw = {
        "github": {"org": "joyent", "token": "", "per_page": "50", "repo_base_url": "https://github.com/joyent"},
        "editor": {"command": "nano"},
        "debug": {"candidate_cache_path": "/tmp/ghrepos.json"},
    }
    data = _flatten_config(raw)
    assert data == {
        "github_org": "joyent",
        "github_token": None,
        "github_per_page": 50,
        "repo_base_url": "https://github.com/joyent",
        "editor_command": "nano",
        "candidate_cache_path": "/tmp/ghrepos.json",
    }


def test_github_token_and_editor_come_from_conventional_env(monkeypatch) -> None:
    monkeypatch.delenv("REPOMANIFEST_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("REPOMANIFEST_EDITOR_COMMAND", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", "nano")
    configured = AppSettings()
    assert configured.github_token == "ghp_example"
    assert configured.editor_command == "nano"


def test_load_settings_reads_config_file(tmp_path: Path, monkeypatch) -> None:
    config = tmp_path / "repomanifest.toml"
    config.write_text('[github]\norg = "example-org"\n', encoding="utf-8")
    monkeypatch.setenv("REPOMANIFEST_CONFIG_PATH", str(config))
    assert load_settings().github_org == "example-org"
