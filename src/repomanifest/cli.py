"""
Command line interface for manifest curation.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console

from .candidates import (
    CachingCandidateSource,
    CandidateSource,
    GitHubCandidateSource,
    JsonFileCandidateCache,
)
from .curation import CurationSession
from .errors import RepoManifestError, UserAbort
from .logger import configure_logging, get_logger, redirect_logging_to_file
from .manifest import ManifestStore
from .settings import settings
from .version import get_version

app = typer.Typer(
    name="repomanifest",
    help="Keep a repository manifest in sync with a GitHub organisation.",
    no_args_is_help=True,
)
configure_logging(enable_console=False)
log = get_logger(__name__)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Emit debug logs to stderr."
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Append detailed logs to this file."
    ),
) -> None:
    """Manifest curation tools."""
    level = logging.DEBUG if verbose else logging.INFO
    if log_file:
        configure_logging(level=level, enable_console=False)
        redirect_logging_to_file(log_file, level=level)
    else:
        configure_logging(level=level, enable_console=verbose)


@contextmanager
def _open_source(
    org: Optional[str], cache_path: Optional[Path]
) -> Iterator[CandidateSource]:
    with GitHubCandidateSource(org=org) as github:
        if cache_path:
            log.info("candidate_cache_enabled", path=str(cache_path))
            yield CachingCandidateSource(github, JsonFileCandidateCache(cache_path))
        else:
            yield github


@app.command("update-manifest")
def update_manifest(
    manifest_path: Path = typer.Argument(
        ..., metavar="MANIFEST-PATH", help="Manifest JSON file to update."
    ),
    org: Optional[str] = typer.Option(
        None, "--org", help="GitHub organisation to list (defaults to settings)."
    ),
    candidate_cache: Optional[Path] = typer.Option(
        None,
        "--candidate-cache",
        help="Debug: reuse a cached candidate listing stored at this path.",
    ),
) -> None:
    """Update the repository list in the given manifest."""
    store = ManifestStore(manifest_path)
    cache_path = candidate_cache or settings.candidate_cache_path
    try:
        with _open_source(org, cache_path) as source:
            result = CurationSession(store, source, console=console).run()
    except UserAbort:
        typer.echo("Aborting.")
        raise typer.Exit(code=UserAbort.exit_code)
    except RepoManifestError as exc:
        log.error("update_manifest_failed", error=str(exc), kind=type(exc).__name__)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code)

    typer.echo(
        f"removed={len(result.removed)} included={len(result.included)} "
        f"excluded={len(result.excluded)} deferred={len(result.deferred)}"
    )


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(get_version())


if __name__ == "__main__":  # pragma: no cover
    app()
