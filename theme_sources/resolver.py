"""
Path resolution for application sources.

The resolver turns startup overrides, persisted settings and the installed
themes registry into a :class:`ResolvedConfig`. Precedence for every path:

1. A startup override, used verbatim (after ``~`` expansion).
2. A path derived from the effective theme and the layout policy.

The theme definition file has two more tiers: when the effective theme is
not installed the default theme is tried, then a bundled theme file.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from theme_sources.config import ResolvedConfig, SourcesConfig, StartupOverrides, ThemeDescriptor
from theme_sources.policy import ThemeLayoutPolicy, effective_theme_id, policy_for

LOGGER = logging.getLogger(__name__)

Settings = Mapping
Registry = Sequence[ThemeDescriptor]


def resolve_home_path(path: Optional[str]) -> Optional[str]:
    """Replace a leading ``~`` with the current user's home directory."""
    if path and path[0] == "~":
        return str(Path.home()) + path[1:]
    return path


def find_theme(theme_id: str, registry: Optional[Registry]) -> Optional[ThemeDescriptor]:
    """Return the registry entry with exactly ``theme_id``, if installed."""
    if not registry:
        return None
    return next((item for item in registry if item.id == theme_id), None)


class PathResolver:
    """
    Computes application source locations.

    Stateless apart from the injected catalog constants, so the same inputs
    always produce the same :class:`ResolvedConfig`.
    """

    def __init__(
        self,
        config: Optional[SourcesConfig] = None,
        policy: Optional[ThemeLayoutPolicy] = None,
    ):
        self.config = config or SourcesConfig()
        self.policy = policy or policy_for(self.config)

    def effective_theme(self, settings: Optional[Settings]) -> str:
        return effective_theme_id(settings, self.config.default_theme)

    def theme_folder_name(self, settings: Optional[Settings]) -> str:
        """Sub-folder of the components tree used for the current theme."""
        return self.policy.folder_name(self.effective_theme(settings))

    def resolve_components_dir(self, settings: Settings, overrides: StartupOverrides) -> str:
        if overrides.app_components:
            return resolve_home_path(overrides.app_components)
        return os.path.join(self.config.sources_base_path, self.theme_folder_name(settings))

    def resolve_import_dir(self, settings: Settings) -> str:
        return os.path.join(
            self.config.app_root,
            self.config.sources_base_path,
            self.theme_folder_name(settings),
        )

    def resolve_import_file(self, settings: Settings, overrides: StartupOverrides) -> str:
        if overrides.import_file:
            return resolve_home_path(overrides.import_file)
        return os.path.join(self.resolve_import_dir(settings), self.config.import_file_name)

    def resolve_search_file(self, settings: Settings, overrides: StartupOverrides) -> str:
        if overrides.search_file:
            return resolve_home_path(overrides.search_file)
        return os.path.join(self.resolve_import_dir(settings), self.config.search_file_name)

    def resolve_theme_file(
        self,
        settings: Settings,
        overrides: StartupOverrides,
        registry: Optional[Registry],
    ) -> str:
        """
        Locate the theme definition file.

        Order: override, requested theme, default theme, bundled theme file.
        Missing themes are logged and never raised.
        """
        if overrides.theme_file:
            return resolve_home_path(overrides.theme_file)

        theme_id = self.effective_theme(settings)
        descriptor = find_theme(theme_id, registry)
        if descriptor is None:
            LOGGER.error(f"Theme '{theme_id}' is not installed. Trying the default theme.")
            descriptor = find_theme(self.config.default_theme, registry)
        if descriptor is None:
            LOGGER.error(
                f"Default theme '{self.config.default_theme}' is not installed. "
                "Using the bundled theme file."
            )
            return os.path.join(self.config.app_root, self.config.bundled_theme_file)
        return descriptor.definition_file

    def resolve_config(
        self,
        settings: Optional[Settings],
        overrides: Optional[StartupOverrides],
        registry: Optional[Registry],
    ) -> ResolvedConfig:
        """Assemble the full configuration record."""
        settings = settings or {}
        registry = registry or []
        overrides = overrides or StartupOverrides()

        theme_file = None
        if self.policy.resolves_theme_file:
            theme_file = self.resolve_theme_file(settings, overrides, registry)

        return ResolvedConfig(
            app_components=self.resolve_components_dir(settings, overrides),
            import_dir=self.resolve_import_dir(settings),
            import_file=self.resolve_import_file(settings, overrides),
            search_file=self.resolve_search_file(settings, overrides),
            theme=self.effective_theme(settings),
            theme_file=theme_file,
        )
