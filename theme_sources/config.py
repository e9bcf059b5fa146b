"""Configuration and value models for theme source resolution."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


LayoutName = Literal["multi_folder", "single_folder"]

DEFAULT_THEME_ID = "dd1b715f-af00-4ee8-8b0c-2a262b3cf0c8"
ANYPOINT_THEME_ID = "859e0c71-ce8b-44df-843b-bca602c13d06"
DEFAULT_DATA_DIR = Path.home() / ".theme_sources"


def application_root() -> Path:
    """Return the directory the application sources are shipped in."""
    if getattr(sys, "frozen", False):
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass)
    return Path(__file__).resolve().parent.parent


class SourcesConfig(BaseModel):
    """Theme catalog constants and base locations used by the resolver."""

    default_theme: str = DEFAULT_THEME_ID
    anypoint_theme: str = ANYPOINT_THEME_ID
    sources_base_path: str = "components"
    import_file_name: str = "import.html"
    search_file_name: str = "import-search-bar.html"
    app_root: str = Field(default_factory=lambda: str(application_root()))
    # Last resort when neither the requested nor the default theme is installed.
    bundled_theme_file: str = os.path.join("themes", "default-theme", "default-theme.html")
    data_dir: Path = DEFAULT_DATA_DIR
    info_file_name: str = "themes-info.json"
    preferences_file_name: str = "settings.yaml"
    layout: LayoutName = "multi_folder"

    model_config = ConfigDict(extra="forbid")

    @property
    def themes_base_path(self) -> Path:
        return self.data_dir / "themes"

    @property
    def info_file_path(self) -> Path:
        return self.themes_base_path / self.info_file_name

    @property
    def preferences_path(self) -> Path:
        return self.data_dir / self.preferences_file_name


class StartupOverrides(BaseModel):
    """Paths given at process start that bypass resolution entirely."""

    theme_file: str | None = None
    import_file: str | None = None
    search_file: str | None = None
    app_components: str | None = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ThemeDescriptor(BaseModel):
    """An installed theme as listed in the themes registry file."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    path: str
    main: str

    model_config = ConfigDict(extra="allow")

    @property
    def definition_file(self) -> str:
        return os.path.join(self.path, self.main)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class ResolvedConfig(BaseModel):
    """Paths the application loads at startup plus the effective theme id."""

    app_components: str
    import_dir: str
    import_file: str
    search_file: str
    theme: str
    theme_file: str | None = None
    reload: bool | None = None

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unset optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = [
    "ANYPOINT_THEME_ID",
    "DEFAULT_DATA_DIR",
    "DEFAULT_THEME_ID",
    "LayoutName",
    "ResolvedConfig",
    "SourcesConfig",
    "StartupOverrides",
    "ThemeDescriptor",
    "application_root",
]
