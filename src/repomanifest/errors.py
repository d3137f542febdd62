"""
Error taxonomy shared by the manifest store, candidate source and curation
session.
"""
from __future__ import annotations

from typing import Optional


class RepoManifestError(Exception):
    """Base class for failures that terminate a run with a message."""

    exit_code = 1


class ConfigError(RepoManifestError):
    """The manifest lacks a field required by the requested operation."""

    exit_code = 2


class ReadError(RepoManifestError):
    """The manifest file could not be read."""


class FormatError(RepoManifestError):
    """A manifest or an edited form could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class FormParseError(FormatError):
    """A line of an edited repo form is neither blank, a comment nor a repo URL."""

    def __init__(self, message: str, line: int, text: str) -> None:
        super().__init__(message, line=line)
        self.text = text


class UpstreamError(RepoManifestError):
    """The candidate source failed or returned nothing usable."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class UserAbort(RepoManifestError):
    """The user cancelled at a prompt, in the editor or at a retry point."""

    exit_code = 0


__all__ = [
    "ConfigError",
    "FormParseError",
    "FormatError",
    "ReadError",
    "RepoManifestError",
    "UpstreamError",
    "UserAbort",
]
