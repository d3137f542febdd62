"""
Text form used to pick repositories in an editor.

Every repository is written as a commented-out URL line. The user selects a
repository by removing the leading ``#`` and may append labels after the URL::

    # https://github.com/TritonDataCenter/sdc-imgapi
    https://github.com/TritonDataCenter/sdc-vmapi tritonservice=vmapi vm

Decoding turns the uncommented lines back into :class:`RepoEntry` objects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Collection, Dict, List, Optional, Sequence, Tuple, Union

from ..errors import FormParseError
from ..manifest.models import CandidateRepo, LabelKind, LabelScalar, RepoEntry

COMMENT_MARKER = "#"


@dataclass(frozen=True)
class LabelValue:
    """A label value tagged with the kind it was parsed as."""

    kind: LabelKind
    value: LabelScalar


def parse_label_value(raw: str) -> LabelValue:
    """Coerce the text after ``=`` in a label token."""
    if raw == "true":
        return LabelValue(LabelKind.BOOLEAN, True)
    if raw == "false":
        return LabelValue(LabelKind.BOOLEAN, False)
    number = _parse_number(raw)
    if number is not None:
        return LabelValue(LabelKind.NUMBER, number)
    return LabelValue(LabelKind.STRING, raw)


def _parse_number(raw: str) -> Optional[Union[int, float]]:
    if not raw or "_" in raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_label_token(token: str) -> Tuple[str, LabelValue]:
    """Split ``key`` or ``key=value`` into the key and its tagged value."""
    key, sep, raw = token.partition("=")
    if not sep:
        return key, LabelValue(LabelKind.BOOLEAN, True)
    return key, parse_label_value(raw)


def format_label(key: str, value: LabelScalar) -> str:
    if value is True:
        return key
    if value is False:
        return f"{key}=false"
    return f"{key}={value}"


RepoLike = Union[RepoEntry, CandidateRepo]


class ReposForm:
    """Encoder/decoder for the editable repo selection form."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.prefix = self.base_url + "/"

    @staticmethod
    def first_selectable_line(front_matter: Sequence[str]) -> int:
        return len(front_matter) + 1

    def repo_line(self, repo: RepoLike) -> str:
        parts = [self.prefix + repo.name]
        labels: Dict[str, LabelScalar] = getattr(repo, "labels", None) or {}
        parts.extend(format_label(key, value) for key, value in labels.items())
        return " ".join(parts)

    def encode(self, front_matter: Sequence[str], repos: Sequence[RepoLike]) -> str:
        lines = list(front_matter)
        lines.extend(f"{COMMENT_MARKER} {self.repo_line(repo)}" for repo in repos)
        return "\n".join(lines) + "\n"

    def decode(
        self,
        text: str,
        parse_labels: bool = True,
        allowed_names: Optional[Collection[str]] = None,
    ) -> List[RepoEntry]:
        """Parse the uncommented repo lines of an edited form.

        Raises :class:`FormParseError` for the first offending line. When
        ``allowed_names`` is given, repos outside it are rejected too.
        """
        repos: List[RepoEntry] = []
        seen: set[str] = set()

        for index, raw_line in enumerate(text.split("\n"), start=1):
            line = raw_line.strip()
            if not line or line.startswith(COMMENT_MARKER):
                continue
            if not line.startswith(self.prefix):
                raise FormParseError(
                    f'line {index} is not a {self.base_url} repo URL: "{line}"',
                    line=index,
                    text=line,
                )

            rest = line[len(self.prefix):]
            if not rest or rest[0].isspace():
                raise FormParseError(
                    f'line {index} is missing a repo name after {self.prefix}: "{line}"',
                    line=index,
                    text=line,
                )
            name, *tokens = rest.split()
            if name in seen:
                raise FormParseError(
                    f'line {index} repeats repo "{name}"', line=index, text=line
                )
            if allowed_names is not None and name not in allowed_names:
                raise FormParseError(
                    f'line {index} names repo "{name}" which is not in this list',
                    line=index,
                    text=line,
                )
            seen.add(name)

            if parse_labels and tokens:
                labels = {}
                for token in tokens:
                    key, value = parse_label_token(token)
                    if not key:
                        raise FormParseError(
                            f'line {index} has a label without a name: "{token}"',
                            line=index,
                            text=line,
                        )
                    labels[key] = value.value
                repos.append(RepoEntry(name=name, labels=labels))
            else:
                repos.append(RepoEntry(name=name))

        return repos
