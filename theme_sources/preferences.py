# theme_sources/preferences.py
"""
Persisted user preferences backed by a YAML file.

The store keeps the most recently loaded settings dict in memory. Callers
mutate that dict and call :meth:`PreferencesStore.store` to write it back,
so a load/mutate/store sequence always persists the object it was handed.
"""

import asyncio
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Protocol

import yaml

from theme_sources.errors import PreferencesError

LOGGER = logging.getLogger(__name__)


class PreferencesProvider(Protocol):
    """Port consumed by the theme sources manager."""

    async def load(self) -> dict[str, Any]:
        ...

    async def store(self) -> None:
        ...


class PreferencesStore:
    """Loads and saves application preferences."""

    def __init__(self, path: Path):
        """
        Initialize the preferences store.

        Args:
            path: Location of the YAML preferences file
        """
        self.path = Path(path)
        self._settings: Optional[dict[str, Any]] = None
        self._write_lock = threading.Lock()

    @property
    def settings(self) -> Optional[dict[str, Any]]:
        """The in-memory settings from the last load, if any."""
        return self._settings

    async def load(self) -> dict[str, Any]:
        """Read the preferences file. Always hits the disk."""
        self._settings = await asyncio.to_thread(self._read)
        return self._settings

    async def store(self) -> None:
        """Persist the in-memory settings object."""
        if self._settings is None:
            self._settings = {}
        # The writer thread gets its own copy of the settings.
        await asyncio.to_thread(self._write, dict(self._settings))

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            LOGGER.debug(f"Preferences file not found at {self.path}. Using defaults.")
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PreferencesError(f"Invalid preferences file {self.path}: {e}") from e
        except OSError as e:
            raise PreferencesError(f"Could not read preferences file {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PreferencesError(f"Preferences file {self.path} must contain a mapping")
        return data

    def _write(self, settings: dict[str, Any]) -> None:
        backup_path = str(self.path) + ".bak"
        with self._write_lock:
            tmp_path: Optional[str] = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                if self.path.exists():
                    with open(self.path, "r", encoding="utf-8") as f:
                        backup_content = f.read()
                    with open(backup_path, "w", encoding="utf-8") as f:
                        f.write(backup_content)
                    LOGGER.debug(f"Created backup at {backup_path}")

                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    dir=self.path.parent,
                    prefix=self.path.name + ".",
                    suffix=".tmp",
                    delete=False,
                ) as f:
                    tmp_path = f.name
                    yaml.safe_dump(
                        settings,
                        f,
                        default_flow_style=False,
                        allow_unicode=True,
                        sort_keys=False,
                    )
                os.replace(tmp_path, self.path)
            except OSError as e:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise PreferencesError(f"Could not write preferences file {self.path}: {e}") from e

        LOGGER.info(f"Saved preferences to {self.path}")


__all__ = ["PreferencesProvider", "PreferencesStore"]
