"""Resolves application source paths and manages the active UI theme."""

__version__ = "0.1.0"

from .channel import EventChannel, ResponseCollector, ThemeEvent
from .config import ResolvedConfig, SourcesConfig, StartupOverrides, ThemeDescriptor
from .errors import PreferencesError, ThemeRegistryError, ThemeSourcesError
from .manager import ThemeSourcesManager
from .policy import MultiFolderLayout, SingleFolderLayout, ThemeLayoutPolicy
from .preferences import PreferencesStore
from .resolver import PathResolver, resolve_home_path
from .result import Err, Ok
from .theme_info import ThemeInfo

__all__ = [
    "__version__",
    "Err",
    "EventChannel",
    "MultiFolderLayout",
    "Ok",
    "PathResolver",
    "PreferencesError",
    "PreferencesStore",
    "ResolvedConfig",
    "ResponseCollector",
    "SingleFolderLayout",
    "SourcesConfig",
    "StartupOverrides",
    "ThemeDescriptor",
    "ThemeEvent",
    "ThemeInfo",
    "ThemeLayoutPolicy",
    "ThemeRegistryError",
    "ThemeSourcesError",
    "ThemeSourcesManager",
    "resolve_home_path",
]
