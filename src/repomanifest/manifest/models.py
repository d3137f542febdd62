"""
Typed view of the manifest document and of candidate repositories.

The manifest models mirror the on-disk JSON keys through aliases and keep
unknown keys, so a rewrite only changes what a curation stage touched.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

LabelScalar = Union[bool, int, float, str]


def _follow_layout(value: Any, layout: Any) -> Any:
    """Order ``value``'s keys like ``layout``; keys new to ``layout`` go last.

    List items are matched to their loaded counterpart by ``name``.
    """
    if isinstance(value, dict) and isinstance(layout, dict):
        ordered = {
            key: _follow_layout(value[key], layout[key]) for key in layout if key in value
        }
        for key, item in value.items():
            ordered.setdefault(key, item)
        return ordered
    if isinstance(value, list) and isinstance(layout, list):
        by_name = {
            item["name"]: item for item in layout if isinstance(item, dict) and "name" in item
        }
        return [
            _follow_layout(item, by_name.get(item.get("name")))
            if isinstance(item, dict)
            else item
            for item in value
        ]
    return value


class LabelKind(str, Enum):
    """Label value types, named as in ``blessedLabels[].type``."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


class LabelSpec(BaseModel):
    """A documented label shown to the user while curating."""

    model_config = ConfigDict(extra="allow")

    name: str
    type: LabelKind = LabelKind.BOOLEAN
    description: str = ""


class CandidateSearch(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: Optional[str] = None
    include_archived: bool = Field(default=False, alias="includeArchived")
    description: Optional[str] = None


class ManifestDefaults(BaseModel):
    model_config = ConfigDict(extra="allow")

    labels: Dict[str, LabelScalar] = Field(default_factory=dict)


class RepoEntry(BaseModel):
    """A repository tracked by the manifest."""

    model_config = ConfigDict(extra="allow")

    name: str
    labels: Dict[str, LabelScalar] = Field(default_factory=dict)


class Manifest(BaseModel):
    """In-memory manifest document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    description: Optional[str] = None
    repo_candidate_search: Optional[CandidateSearch] = Field(
        default=None, alias="repoCandidateSearch"
    )
    blessed_labels: List[LabelSpec] = Field(default_factory=list, alias="blessedLabels")
    defaults: Optional[ManifestDefaults] = None
    repositories: List[RepoEntry] = Field(default_factory=list)
    excluded_repositories: List[str] = Field(
        default_factory=list, alias="excludedRepositories"
    )
    _layout: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _check_repository_names(self) -> "Manifest":
        repo_counts = Counter(repo.name for repo in self.repositories)
        duplicates = sorted(name for name, count in repo_counts.items() if count > 1)
        if duplicates:
            raise ValueError(
                f"duplicate names in repositories: {', '.join(duplicates)}"
            )
        excluded_counts = Counter(self.excluded_repositories)
        duplicates = sorted(name for name, count in excluded_counts.items() if count > 1)
        if duplicates:
            raise ValueError(
                f"duplicate names in excludedRepositories: {', '.join(duplicates)}"
            )
        overlap = sorted(set(repo_counts) & set(excluded_counts))
        if overlap:
            raise ValueError(
                "names listed in both repositories and excludedRepositories: "
                + ", ".join(overlap)
            )
        return self

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Manifest":
        manifest = cls.model_validate(document)
        manifest._layout = dict(document)
        return manifest

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON-ready document, omitting keys that were never set.

        Keys keep the order they had in the loaded document.
        """
        document = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        if self._layout is None:
            return document
        return _follow_layout(document, self._layout)

    def repository_names(self) -> List[str]:
        return [repo.name for repo in self.repositories]


@dataclass(frozen=True)
class CandidateRepo:
    """A repository reported by the candidate source."""

    name: str
    archived: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CandidateRepo":
        return cls(name=str(payload["name"]), archived=bool(payload.get("archived", False)))

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "archived": self.archived}
