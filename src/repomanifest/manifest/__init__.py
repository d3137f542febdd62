"""
Manifest document model and its JSON file store.
"""
from .models import (
    CandidateRepo,
    CandidateSearch,
    LabelKind,
    LabelScalar,
    LabelSpec,
    Manifest,
    ManifestDefaults,
    RepoEntry,
)
from .store import ManifestStore

__all__ = [
    "CandidateRepo",
    "CandidateSearch",
    "LabelKind",
    "LabelScalar",
    "LabelSpec",
    "Manifest",
    "ManifestDefaults",
    "ManifestStore",
    "RepoEntry",
]
