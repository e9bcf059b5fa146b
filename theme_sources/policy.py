"""Component layout policies.

A deployment ships either one components tree per layout (``default`` and
``anypoint``) or a single ``default`` tree. The policy decides which
sub-folder is used, whether a theme definition file is resolved, and whether
switching themes forces the UI to reload.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol

from theme_sources.config import SourcesConfig

DEFAULT_FOLDER = "default"
ANYPOINT_FOLDER = "anypoint"


class ThemeLayoutPolicy(Protocol):
    name: str
    resolves_theme_file: bool

    def folder_name(self, theme_id: str) -> str:
        ...

    def requires_reload(self, previous_id: str, requested_id: str) -> Optional[bool]:
        ...


class MultiFolderLayout:
    """Separate components tree for the anypoint theme."""

    name = "multi_folder"
    resolves_theme_file = True

    def __init__(self, anypoint_theme: str):
        self.anypoint_theme = anypoint_theme

    def folder_name(self, theme_id: str) -> str:
        if theme_id == self.anypoint_theme:
            return ANYPOINT_FOLDER
        return DEFAULT_FOLDER

    def requires_reload(self, previous_id: str, requested_id: str) -> Optional[bool]:
        # Entering or leaving the anypoint tree swaps every loaded component.
        return requested_id == self.anypoint_theme or previous_id == self.anypoint_theme


class SingleFolderLayout:
    """One components tree shared by every theme."""

    name = "single_folder"
    resolves_theme_file = False

    def folder_name(self, theme_id: str) -> str:
        return DEFAULT_FOLDER

    def requires_reload(self, previous_id: str, requested_id: str) -> Optional[bool]:
        return None


def policy_for(config: SourcesConfig) -> ThemeLayoutPolicy:
    """Build the layout policy named by ``config.layout``."""
    if config.layout == "multi_folder":
        return MultiFolderLayout(config.anypoint_theme)
    if config.layout == "single_folder":
        return SingleFolderLayout()
    raise ValueError(f"Unknown layout: {config.layout}")


def effective_theme_id(settings: Optional[Mapping], default_theme: str) -> str:
    """Theme id in force: the persisted choice, else the default theme."""
    if not settings:
        return default_theme
    return settings.get("theme") or default_theme


__all__ = [
    "ANYPOINT_FOLDER",
    "DEFAULT_FOLDER",
    "MultiFolderLayout",
    "SingleFolderLayout",
    "ThemeLayoutPolicy",
    "effective_theme_id",
    "policy_for",
]
