"""
Interactive "update manifest" workflow.

The session reconciles the manifest with the candidate listing once, then
walks the user through three independent stages:

1. drop repositories that are no longer candidates (archived, deleted or
   renamed upstream);
2. pick which new candidates to include, optionally labelling them;
3. pick which of the remaining candidates to exclude.

Candidates left over after step 3 are offered again on the next run. Each
stage saves the manifest right after the user confirms it, so aborting a
later stage never loses an earlier decision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from rich.console import Console

from ..candidates import CandidateSource
from ..errors import ConfigError, UserAbort
from ..interaction import ConsolePrompter, Editor, Prompter, TerminalEditor
from ..logger import get_logger
from ..manifest import CandidateRepo, LabelKind, Manifest, ManifestStore
from ..settings import settings
from .edit_loop import EditRetryLoop
from .form import ReposForm, format_label
from .reconcile import Reconciliation, reconcile

log = get_logger(__name__)

SAMPLE_SIZE = 9
INCLUDE_FILENAME = "newIncludeRepos"
EXCLUDE_FILENAME = "newExcludeRepos"

EXCLUSION_FRONT_MATTER = [
    "# Uncomment any repos that should be *excluded* from this manifest",
    '# (they will be noted in the "excludedRepositories" field).',
    "",
]


def inclusion_front_matter(manifest: Manifest, form: ReposForm) -> List[str]:
    """Instructions plus the default and blessed label vocabulary."""
    lines = [
        "# Uncomment any repos that should be *included* as relevant",
        "# for this manifest.",
        "#",
        "# Optionally you may include a space-separate set of labels after",
        "# a repo to label it (KEY=VALUE or KEY for a bool), e.g.:",
        f"#     {form.prefix}sdc-imgapi tritonservice=imgapi vm",
        f"#     {form.prefix}triton-cmon-agent tritonservice=cmon-agent agent",
    ]
    if manifest.defaults and manifest.defaults.labels:
        lines.append("#")
        lines.append("# Default labels:")
        for key, value in manifest.defaults.labels.items():
            lines.append(f"# - {format_label(key, value)}")
    if manifest.blessed_labels:
        lines.append("#")
        lines.append("# Blessed labels:")
        for label in manifest.blessed_labels:
            if label.type is LabelKind.BOOLEAN:
                lines.append(f"# - {label.name} - {label.description}")
            else:
                lines.append(f"# - {label.name}=<{label.type.value}> - {label.description}")
    lines.append("")
    return lines


@dataclass
class SessionState:
    """Everything one run carries from stage to stage."""

    manifest: Manifest
    reconciliation: Reconciliation
    remaining: List[CandidateRepo] = field(default_factory=list)
    inclusion_attempted: bool = False
    removed: List[str] = field(default_factory=list)
    included: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    saves: int = 0


@dataclass
class SessionResult:
    manifest: Manifest
    removed: List[str]
    included: List[str]
    excluded: List[str]
    deferred: List[str]
    saves: int


class CurationSession:
    """Drives reconciliation and the three curation stages for one manifest."""

    def __init__(
        self,
        store: ManifestStore,
        source: CandidateSource,
        editor: Optional[Editor] = None,
        prompter: Optional[Prompter] = None,
        console: Optional[Console] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.store = store
        self.source = source
        self.editor = editor or TerminalEditor()
        self.prompter = prompter or ConsolePrompter()
        self.console = console or Console()
        self.form = ReposForm(base_url or settings.repo_base_url)
        self.edit_loop = EditRetryLoop(self.editor, self.prompter, self.form, self.console)

    def run(self) -> SessionResult:
        state = self.prepare()
        state = self.remove_gone(state)
        state = self.confirm_inclusion(state)
        state = self.include_new(state)
        state = self.exclude_remaining(state)
        return SessionResult(
            manifest=state.manifest,
            removed=state.removed,
            included=state.included,
            excluded=state.excluded,
            deferred=[repo.name for repo in state.remaining]
            if state.inclusion_attempted
            else state.reconciliation.new_names,
            saves=state.saves,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def prepare(self) -> SessionState:
        """Load the manifest, fetch candidates and reconcile. No mutation."""
        manifest = self.store.load()
        search = manifest.repo_candidate_search
        if search is None or not search.type:
            raise ConfigError(
                f'manifest "{self.store.path}" is missing "repoCandidateSearch.type"'
            )

        self._say("Gathering candidate repos.")
        with self.console.status("Listing candidate repositories..."):
            candidates = self.source.list_candidates(search.type, search.include_archived)
        return SessionState(manifest=manifest, reconciliation=reconcile(manifest, candidates))

    def remove_gone(self, state: SessionState) -> SessionState:
        names = state.reconciliation.gone_names
        if not names:
            self._say("No newly archived repos to remove from the manifest.")
            return state

        self._say(
            "\n".join(
                [
                    "",
                    "* * *",
                    f"The following {len(names)} repo(s) have been archived, "
                    "or are otherwise no longer",
                    f'candidate repos for "{self.store.path}":',
                    "    " + "\n    ".join(names),
                ]
            )
        )
        try:
            confirmed = self.prompter.confirm("Remove them from the manifest?", default=True)
        except UserAbort:
            confirmed = False
        if not confirmed:
            self._say("Skipping removal of archived repos")
            return state

        gone = set(names)
        manifest = state.manifest
        manifest.repositories = [r for r in manifest.repositories if r.name not in gone]
        manifest.excluded_repositories = [
            n for n in manifest.excluded_repositories if n not in gone
        ]
        self._persist(state)
        state.removed = list(names)
        log.info("gone_repos_removed", count=len(names))
        return state

    def confirm_inclusion(self, state: SessionState) -> SessionState:
        new_repos = state.reconciliation.new_repos
        if not new_repos:
            self._say("No new repos to add to the manifest.")
            return state

        sample = [repo.name for repo in new_repos[:SAMPLE_SIZE]]
        if len(new_repos) > SAMPLE_SIZE:
            sample.append("...")
        search = state.manifest.repo_candidate_search
        description = (search.description if search else None) or "(no description)"
        self._say(
            "\n".join(
                [
                    "",
                    "* * *",
                    f"There are {len(new_repos)} candidate new repo(s) to work through:",
                    "    " + "\n    ".join(sample),
                    "",
                    "The manifest defines relevant repos as follows:",
                    f"    {description}",
                    "",
                    "The process is:",
                    "1. edit the list of repos to include in this manifest",
                    "   (possibly including additional labels)",
                    "2. edit the list of repos to exclude as not relevant",
                    "3. any left over repos are deferred until the next",
                    "   `repomanifest update-manifest ...`",
                    "",
                ]
            )
        )
        try:
            self.prompter.wait_for_enter(
                "Hit <Enter> to edit inclusions (step 1), <Ctrl+C> to abort."
            )
        except UserAbort:
            self._say("\nSkipping adding new repos.")
            return state

        state.inclusion_attempted = True
        state.remaining = list(new_repos)
        return state

    def include_new(self, state: SessionState) -> SessionState:
        if not state.inclusion_attempted:
            return state

        try:
            selected = self.edit_loop.run(
                inclusion_front_matter(state.manifest, self.form),
                state.remaining,
                filename=INCLUDE_FILENAME,
                parse_labels=True,
            )
        except UserAbort:
            self._say("Skipping adding new repos.")
            return state
        if not selected:
            self._say("No new repos to include.")
            return state

        manifest = state.manifest
        manifest.repositories = sorted(
            manifest.repositories + selected, key=lambda repo: repo.name
        )
        added = {repo.name for repo in selected}
        state.remaining = [repo for repo in state.remaining if repo.name not in added]
        self._persist(state)
        state.included = [repo.name for repo in selected]
        log.info("new_repos_included", count=len(selected), remaining=len(state.remaining))
        return state

    def exclude_remaining(self, state: SessionState) -> SessionState:
        if not state.inclusion_attempted or not state.remaining:
            return state

        self._say(
            "\n".join(
                [
                    "",
                    "* * *",
                    "Next we will handle *exclusions*, by editing the remaining",
                    "list of repos down to those to be excluded from this manifest.",
                ]
            )
        )
        try:
            self.prompter.wait_for_enter(
                "Hit <Enter> to edit exclusions (step 2), <Ctrl+C> to abort."
            )
            selected = self.edit_loop.run(
                EXCLUSION_FRONT_MATTER,
                state.remaining,
                filename=EXCLUDE_FILENAME,
                parse_labels=False,
            )
        except UserAbort:
            self._say("\nSkipping adding new excluded repos.")
            return state
        if not selected:
            self._say("No new repos to exclude.")
            return state

        manifest = state.manifest
        names = [repo.name for repo in selected]
        manifest.excluded_repositories = sorted(manifest.excluded_repositories + names)
        dropped = set(names)
        state.remaining = [repo for repo in state.remaining if repo.name not in dropped]
        self._persist(state)
        state.excluded = names
        log.info("new_repos_excluded", count=len(names), remaining=len(state.remaining))
        return state

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _persist(self, state: SessionState) -> None:
        self.store.save(state.manifest)
        state.saves += 1
        self._say(f'Updated "{self.store.path}".')

    def _say(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)


__all__ = [
    "CurationSession",
    "SessionResult",
    "SessionState",
    "inclusion_front_matter",
]
