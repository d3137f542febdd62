"""
Reconciliation, repo selection forms and the interactive curation session.
"""
from .edit_loop import EditRetryLoop, EditState
from .form import LabelValue, ReposForm, parse_label_token, parse_label_value
from .reconcile import Reconciliation, reconcile
from .session import CurationSession, SessionResult, SessionState

__all__ = [
    "CurationSession",
    "EditRetryLoop",
    "EditState",
    "LabelValue",
    "Reconciliation",
    "ReposForm",
    "SessionResult",
    "SessionState",
    "parse_label_token",
    "parse_label_value",
    "reconcile",
]
