"""
JSON persistence for the manifest file of record.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from ..errors import FormatError, ReadError, RepoManifestError
from ..logger import get_logger
from .models import Manifest

log = get_logger(__name__)


class ManifestStore:
    """Loads and rewrites a single manifest file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Manifest:
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ReadError(f'could not read manifest "{self.path}": {exc}') from exc

        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise FormatError(
                f'repo manifest "{self.path}" is not valid JSON: {exc}', line=exc.lineno
            ) from exc
        if not isinstance(document, dict):
            raise FormatError(f'repo manifest "{self.path}" is not a JSON object')

        try:
            manifest = Manifest.from_document(document)
        except ValidationError as exc:
            raise FormatError(f'repo manifest "{self.path}" is invalid: {exc}') from exc

        log.info(
            "manifest_loaded",
            path=str(self.path),
            repositories=len(manifest.repositories),
            excluded=len(manifest.excluded_repositories),
        )
        return manifest

    def save(self, manifest: Manifest) -> None:
        """Rewrite the whole file: 4-space indent, trailing newline."""
        text = json.dumps(manifest.to_document(), indent=4, ensure_ascii=False) + "\n"
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise RepoManifestError(f'could not write manifest "{self.path}": {exc}') from exc
        log.info(
            "manifest_saved",
            path=str(self.path),
            repositories=len(manifest.repositories),
            excluded=len(manifest.excluded_repositories),
        )
