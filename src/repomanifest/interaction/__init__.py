"""
Terminal collaborators used by the curation session.
"""
from .editor import Editor, TerminalEditor
from .prompts import ConsolePrompter, Prompter

__all__ = ["ConsolePrompter", "Editor", "Prompter", "TerminalEditor"]
