"""Exception types raised by the theme sources collaborators."""


class ThemeSourcesError(Exception):
    """Base class for all theme sources errors."""


class PreferencesError(ThemeSourcesError):
    """Raised when the preferences file cannot be read or written."""


class ThemeRegistryError(ThemeSourcesError):
    """Raised when the installed themes registry cannot be read."""
