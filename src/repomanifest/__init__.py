"""
Manifest reconciliation and interactive curation for repository manifests.
"""
from .version import __version__

__all__ = ["__version__"]
