# theme_sources/manager.py
"""
Theme sources manager.

Tells the UI process where the application sources are and which theme to
load, and handles theme activation requests coming over the event channel:

- list installed themes
- report the active theme
- activate a theme, persist the choice and return the new configuration

Collaborator failures are reported back to the caller as an error event
carrying ``{"message": ...}`` and the originating correlation id.
"""

import asyncio
import logging
from typing import Any, Optional

from theme_sources.channel import EventChannel, Sender, ThemeEvent
from theme_sources.config import ResolvedConfig, SourcesConfig, StartupOverrides, ThemeDescriptor
from theme_sources.preferences import PreferencesProvider, PreferencesStore
from theme_sources.resolver import PathResolver, find_theme
from theme_sources.result import Err, Ok, Result, capture
from theme_sources.theme_info import ThemeInfo, ThemeRegistryProvider

LOGGER = logging.getLogger(__name__)


class ThemeSourcesManager:
    """
    Coordinates preferences, the themes registry and the path resolver.

    The manager holds no state between requests other than what the
    preferences collaborator persists. Concurrent activations are not
    serialized; the last one to store wins.
    """

    def __init__(
        self,
        preferences: PreferencesProvider,
        registry: ThemeRegistryProvider,
        overrides: Optional[StartupOverrides] = None,
        config: Optional[SourcesConfig] = None,
        resolver: Optional[PathResolver] = None,
    ):
        """
        Initialize the manager.

        Args:
            preferences: Preferences collaborator (load/store)
            registry: Installed themes collaborator (load)
            overrides: Startup paths that bypass resolution
            config: Theme catalog constants and base paths
            resolver: Custom resolver, built from ``config`` when omitted
        """
        self.preferences = preferences
        self.registry = registry
        self.overrides = overrides or StartupOverrides()
        self.config = config or (resolver.config if resolver else SourcesConfig())
        self.resolver = resolver or PathResolver(self.config)

    @classmethod
    def from_config(
        cls,
        config: Optional[SourcesConfig] = None,
        overrides: Optional[StartupOverrides] = None,
    ) -> "ThemeSourcesManager":
        """Build a manager backed by the on-disk preferences and registry files."""
        config = config or SourcesConfig()
        return cls(
            preferences=PreferencesStore(config.preferences_path),
            registry=ThemeInfo(config.info_file_path),
            overrides=overrides,
            config=config,
        )

    def listen(self, channel: EventChannel) -> None:
        """Register the request handlers on the channel."""
        channel.on(ThemeEvent.LIST_THEMES, self.list_themes)
        channel.on(ThemeEvent.ACTIVE_THEME_INFO, self.active_theme_info)
        channel.on(ThemeEvent.ACTIVATE_THEME, self.activate_theme)

    def unlisten(self, channel: EventChannel) -> None:
        """Remove the request handlers from the channel."""
        channel.remove_listener(ThemeEvent.LIST_THEMES, self.list_themes)
        channel.remove_listener(ThemeEvent.ACTIVE_THEME_INFO, self.active_theme_info)
        channel.remove_listener(ThemeEvent.ACTIVATE_THEME, self.activate_theme)

    async def _load_settings(self) -> Result[dict[str, Any]]:
        return await capture(self.preferences.load())

    async def _load_themes(self) -> Result[list[ThemeDescriptor]]:
        return await capture(self.registry.load())

    async def _load_both(self) -> Result[tuple[dict[str, Any], list[ThemeDescriptor]]]:
        settings, themes = await asyncio.gather(self._load_settings(), self._load_themes())
        if not settings.ok:
            return settings
        if not themes.ok:
            return themes
        return Ok((settings.value or {}, themes.value or []))

    async def get_app_config(self) -> Result[ResolvedConfig]:
        """Resolve the application paths from freshly loaded settings."""
        loaded = await self._load_both()
        if not loaded.ok:
            return loaded
        settings, themes = loaded.value
        return Ok(self.resolver.resolve_config(settings, self.overrides, themes))

    def _send_error(self, sender: Sender, request_id: str, error: Err) -> None:
        LOGGER.warning(f"Theme request {request_id} failed: {error.message}")
        sender.send(ThemeEvent.ERROR, request_id, error.to_payload())

    async def list_themes(self, sender: Sender, request_id: str) -> None:
        """Reply with every installed theme."""
        themes = await self._load_themes()
        if not themes.ok:
            self._send_error(sender, request_id, themes)
            return
        payload = [theme.to_payload() for theme in themes.value or []]
        sender.send(ThemeEvent.THEMES_LIST, request_id, payload)

    async def active_theme_info(self, sender: Sender, request_id: str) -> None:
        """Reply with the effective theme id and its registry entry, if any."""
        loaded = await self._load_both()
        if not loaded.ok:
            self._send_error(sender, request_id, loaded)
            return
        settings, themes = loaded.value
        theme_id = self.resolver.effective_theme(settings)
        descriptor = find_theme(theme_id, themes)
        sender.send(
            ThemeEvent.THEME_INFO,
            request_id,
            {"id": theme_id, "descriptor": descriptor.to_payload() if descriptor else None},
        )

    async def activate_theme(self, sender: Sender, request_id: str, theme_id: str) -> None:
        """Persist ``theme_id`` as the active theme and reply with the new config."""
        loaded = await self._load_settings()
        if not loaded.ok:
            self._send_error(sender, request_id, loaded)
            return
        settings = loaded.value
        if settings is None:
            self._send_error(sender, request_id, Err("Preferences are not available"))
            return

        previous_id = self.resolver.effective_theme(settings)
        reload = self.resolver.policy.requires_reload(previous_id, theme_id)
        settings["theme"] = theme_id

        # The new id must be committed before any config reflecting it is built.
        stored = await capture(self.preferences.store())
        if not stored.ok:
            self._send_error(sender, request_id, stored)
            return
        LOGGER.info(
            f"Activated theme '{theme_id}' (previous: '{previous_id}', layout: {self.resolver.policy.name})"
        )

        config = await self.get_app_config()
        if not config.ok:
            self._send_error(sender, request_id, config)
            return
        resolved = config.value
        if reload is not None:
            resolved = resolved.model_copy(update={"reload": reload})
        sender.send(ThemeEvent.THEME_ACTIVATED, request_id, resolved.to_payload())


__all__ = ["ThemeSourcesManager"]
