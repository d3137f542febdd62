"""
Edit / validate / retry loop around a single repo form.
"""

from __future__ import annotations

from enum import Enum
from typing import Collection, List, Optional, Sequence

from rich.console import Console

from ..errors import FormParseError, UserAbort
from ..interaction import Editor, Prompter
from ..logger import get_logger
from ..manifest.models import RepoEntry
from .form import RepoLike, ReposForm

log = get_logger(__name__)

RETRY_PROMPT = "Press <Enter> to re-edit, <Ctrl+C> to abort."


class EditState(str, Enum):
    PRESENT = "present"
    PARSE = "parse"
    ACCEPT = "accept"
    ERROR = "error"
    RETRY_PROMPT = "retry_prompt"
    ABORT = "abort"


class EditRetryLoop:
    """Presents a form until it parses cleanly or the user gives up.

    A parse error re-opens the *edited* text with the cursor on the failing
    line. Retries are unbounded; the only ways out are an accepted parse or a
    :class:`UserAbort`, either from the editor or from the retry prompt.
    """

    def __init__(
        self,
        editor: Editor,
        prompter: Prompter,
        form: ReposForm,
        console: Optional[Console] = None,
    ) -> None:
        self.editor = editor
        self.prompter = prompter
        self.form = form
        self.console = console or Console()
        self.attempts = 0

    def run(
        self,
        front_matter: Sequence[str],
        repos: Sequence[RepoLike],
        filename: str = "repos",
        parse_labels: bool = True,
        allowed_names: Optional[Collection[str]] = None,
    ) -> List[RepoEntry]:
        if allowed_names is None:
            allowed_names = {repo.name for repo in repos}
        text = self.form.encode(front_matter, repos)
        cursor: Optional[int] = self.form.first_selectable_line(front_matter)
        state = EditState.PRESENT
        error: Optional[FormParseError] = None
        retry_line: Optional[int] = None
        accepted: List[RepoEntry] = []
        self.attempts = 0

        while True:
            if state is EditState.PRESENT:
                self.attempts += 1
                text = self.editor.edit(text, line=cursor, filename=filename)
                state = EditState.PARSE

            elif state is EditState.PARSE:
                try:
                    accepted = self.form.decode(
                        text, parse_labels=parse_labels, allowed_names=allowed_names
                    )
                except FormParseError as exc:
                    error = exc
                    state = EditState.ERROR
                else:
                    state = EditState.ACCEPT

            elif state is EditState.ERROR:
                if error is None:
                    raise RuntimeError("edit loop reached the error state without an error")
                log.warning(
                    "form_parse_failed",
                    filename=filename,
                    line=error.line,
                    attempt=self.attempts,
                )
                self._say(f"* * *\nerror: {error}")
                retry_line = error.line
                state = EditState.RETRY_PROMPT

            elif state is EditState.RETRY_PROMPT:
                try:
                    self.prompter.wait_for_enter(RETRY_PROMPT)
                except UserAbort:
                    state = EditState.ABORT
                else:
                    cursor = retry_line
                    state = EditState.PRESENT

            elif state is EditState.ACCEPT:
                log.info(
                    "form_accepted",
                    filename=filename,
                    selected=len(accepted),
                    attempts=self.attempts,
                )
                return accepted

            else:
                self._say("\nAborting.")
                raise UserAbort(f"editing of {filename} aborted")

    def _say(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)
