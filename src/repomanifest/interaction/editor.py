"""
Editor collaborator: hand a block of text to the user's editor.
"""

from __future__ import annotations

import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from ..errors import ConfigError, UserAbort
from ..logger import get_logger
from ..settings import settings

log = get_logger(__name__)

# Editors that understand a leading "+N" argument as "start on line N".
_LINE_AWARE_EDITORS = frozenset(
    {
        "vi",
        "vim",
        "nvim",
        "gvim",
        "view",
        "emacs",
        "emacsclient",
        "nano",
        "micro",
        "joe",
        "jed",
        "mg",
        "kak",
        "hx",
    }
)


class Editor(Protocol):
    """Edits ``text`` interactively and returns the result.

    Implementations raise :class:`UserAbort` when the user cancels.
    """

    def edit(self, text: str, line: Optional[int] = None, filename: str = "repos") -> str:
        ...


class TerminalEditor:
    """Runs ``$VISUAL``/``$EDITOR`` (or the configured command) on a temp file."""

    def __init__(self, command: Optional[str] = None) -> None:
        self.command = command or settings.editor_command

    def build_argv(self, path: Path, line: Optional[int]) -> list[str]:
        argv = shlex.split(self.command)
        if not argv:
            raise ConfigError("no editor configured; set $EDITOR or REPOMANIFEST_EDITOR_COMMAND")
        if line and Path(argv[0]).name in _LINE_AWARE_EDITORS:
            argv.append(f"+{line}")
        argv.append(str(path))
        return argv

    def edit(self, text: str, line: Optional[int] = None, filename: str = "repos") -> str:
        with tempfile.TemporaryDirectory(prefix="repomanifest-") as tmpdir:
            path = Path(tmpdir) / f"{filename}.txt"
            path.write_text(text, encoding="utf-8")
            argv = self.build_argv(path, line)
            log.debug("editor_launch", argv=argv)
            try:
                result = subprocess.run(argv, check=False)
            except OSError as exc:
                raise ConfigError(f'could not launch editor "{argv[0]}": {exc}') from exc
            if result.returncode != 0:
                log.info("editor_cancelled", returncode=result.returncode)
                raise UserAbort(f"editor exited with status {result.returncode}")
            return path.read_text(encoding="utf-8")
