"""Reader for the installed themes registry (``themes-info.json``)."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from theme_sources.config import ThemeDescriptor
from theme_sources.errors import ThemeRegistryError

LOGGER = logging.getLogger(__name__)


class ThemeRegistryProvider(Protocol):
    """Port consumed by the theme sources manager."""

    async def load(self) -> list[ThemeDescriptor]:
        ...


class ThemeInfo:
    """Reads the list of installed themes from disk on every call."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def load(self) -> list[ThemeDescriptor]:
        return await asyncio.to_thread(self._read)

    def _read(self) -> list[ThemeDescriptor]:
        if not self.path.exists():
            LOGGER.debug(f"No themes registry at {self.path}")
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ThemeRegistryError(f"Invalid themes registry {self.path}: {exc}") from exc
        except OSError as exc:
            raise ThemeRegistryError(f"Could not read themes registry {self.path}: {exc}") from exc

        if data is None:
            return []
        if not isinstance(data, list):
            raise ThemeRegistryError(f"Themes registry {self.path} must contain a list")

        try:
            return [ThemeDescriptor.model_validate(item) for item in data]
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ThemeRegistryError(f"Invalid theme entry in {self.path}: {details}") from exc


__all__ = ["ThemeInfo", "ThemeRegistryProvider"]
