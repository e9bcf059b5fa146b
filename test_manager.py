# ruff: noqa: S101 - simple asserts for tests

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from theme_sources.channel import EventChannel, ResponseCollector, ThemeEvent
from theme_sources.config import ANYPOINT_THEME_ID, DEFAULT_THEME_ID, SourcesConfig, StartupOverrides, ThemeDescriptor
from theme_sources.errors import PreferencesError, ThemeRegistryError
from theme_sources.manager import ThemeSourcesManager


THEMES = [
    ThemeDescriptor(id=DEFAULT_THEME_ID, path="default", main="default.html"),
    ThemeDescriptor(id=ANYPOINT_THEME_ID, path="anypoint", main="anypoint.html"),
]


class _FakePreferences:
    """In-memory preferences with a persisted copy, like the file store."""

    def __init__(self, persisted: dict[str, Any] | None = None, fail_load: Exception | None = None,
                 fail_store: Exception | None = None) -> None:
        self.persisted = dict(persisted or {})
        self.settings: dict[str, Any] | None = None
        self.fail_load = fail_load
        self.fail_store = fail_store
        self.load_calls = 0
        self.store_calls = 0

    async def load(self) -> dict[str, Any]:
        self.load_calls += 1
        await asyncio.sleep(0)
        if self.fail_load is not None:
            raise self.fail_load
        self.settings = dict(self.persisted)
        return self.settings

    async def store(self) -> None:
        self.store_calls += 1
        await asyncio.sleep(0)
        if self.fail_store is not None:
            raise self.fail_store
        self.persisted = dict(self.settings or {})


class _FakeRegistry:
    def __init__(self, themes: list[ThemeDescriptor] | None = None, fail: Exception | None = None) -> None:
        self.themes = themes
        self.fail = fail

    async def load(self) -> list[ThemeDescriptor] | None:
        await asyncio.sleep(0)
        if self.fail is not None:
            raise self.fail
        return self.themes


def _manager(prefs: _FakePreferences, registry: _FakeRegistry, **kwargs: Any) -> ThemeSourcesManager:
    config = kwargs.pop("config", SourcesConfig(app_root=""))
    return ThemeSourcesManager(prefs, registry, config=config, **kwargs)


def _call(handler, *args: Any):
    async def _run():
        collector = ResponseCollector()
        await handler(collector, "req-1", *args)
        return collector

    return asyncio.run(_run())


def test_get_app_config_reads_fresh_settings() -> None:
    prefs = _FakePreferences({"theme": ANYPOINT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))

    result = asyncio.run(manager.get_app_config())
    assert result.ok
    assert result.value.app_components == "components/anypoint"
    assert result.value.theme_file == "anypoint/anypoint.html"

    prefs.persisted = {}
    result = asyncio.run(manager.get_app_config())
    assert result.value.app_components == "components/default"
    assert prefs.load_calls == 2


def test_get_app_config_with_overrides() -> None:
    manager = _manager(
        _FakePreferences({"theme": ANYPOINT_THEME_ID}),
        _FakeRegistry(THEMES),
        overrides=StartupOverrides(import_file="/x/import.html"),
    )
    result = asyncio.run(manager.get_app_config())
    assert result.value.import_file == "/x/import.html"


def test_get_app_config_reports_registry_failure() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(fail=ThemeRegistryError("bad registry")))
    result = asyncio.run(manager.get_app_config())
    assert not result.ok
    assert result.message == "bad registry"


def test_list_themes_sends_registry() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(THEMES))
    collector = _call(manager.list_themes)

    assert len(collector.responses) == 1
    response = collector.responses[0]
    assert response.event == ThemeEvent.THEMES_LIST
    assert response.request_id == "req-1"
    assert [item["id"] for item in response.payload] == [DEFAULT_THEME_ID, ANYPOINT_THEME_ID]


def test_list_themes_with_no_registry() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(None))
    collector = _call(manager.list_themes)
    assert collector.responses[0].payload == []


def test_list_themes_error_event() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(fail=OSError("disk gone")))
    collector = _call(manager.list_themes)

    response = collector.responses[0]
    assert response.event == ThemeEvent.ERROR
    assert response.request_id == "req-1"
    assert response.payload == {"message": "disk gone"}


def test_error_without_text_uses_exception_name() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(fail=ThemeRegistryError()))
    collector = _call(manager.list_themes)
    assert collector.responses[0].payload == {"message": "ThemeRegistryError"}


def test_active_theme_info_default() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(THEMES))
    collector = _call(manager.active_theme_info)

    response = collector.responses[0]
    assert response.event == ThemeEvent.THEME_INFO
    assert response.request_id == "req-1"
    assert response.payload["id"] == DEFAULT_THEME_ID
    assert response.payload["descriptor"]["main"] == "default.html"


def test_active_theme_info_missing_descriptor() -> None:
    manager = _manager(_FakePreferences({"theme": "uninstalled"}), _FakeRegistry(THEMES))
    collector = _call(manager.active_theme_info)
    assert collector.responses[0].payload == {"id": "uninstalled", "descriptor": None}


def test_active_theme_info_error_event() -> None:
    manager = _manager(_FakePreferences(fail_load=PreferencesError("corrupt")), _FakeRegistry(THEMES))
    collector = _call(manager.active_theme_info)
    assert collector.responses[0].event == ThemeEvent.ERROR
    assert collector.responses[0].payload == {"message": "corrupt"}


def test_activate_anypoint_requires_reload() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))
    collector = _call(manager.activate_theme, ANYPOINT_THEME_ID)

    response = collector.responses[0]
    assert response.event == ThemeEvent.THEME_ACTIVATED
    assert response.request_id == "req-1"
    assert response.payload["reload"] is True
    assert response.payload["theme"] == ANYPOINT_THEME_ID
    assert response.payload["appComponents"] == "components/anypoint"
    assert response.payload["themeFile"] == "anypoint/anypoint.html"
    assert prefs.persisted == {"theme": ANYPOINT_THEME_ID}


def test_activate_same_theme_does_not_reload() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))
    collector = _call(manager.activate_theme, DEFAULT_THEME_ID)
    assert collector.responses[0].payload["reload"] is False


def test_activate_leaving_anypoint_requires_reload() -> None:
    prefs = _FakePreferences({"theme": ANYPOINT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))
    collector = _call(manager.activate_theme, DEFAULT_THEME_ID)
    assert collector.responses[0].payload["reload"] is True


def test_activate_single_folder_has_no_reload_flag() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES), config=SourcesConfig(app_root="", layout="single_folder"))
    collector = _call(manager.activate_theme, ANYPOINT_THEME_ID)

    payload = collector.responses[0].payload
    assert "reload" not in payload
    assert "themeFile" not in payload
    assert payload["theme"] == ANYPOINT_THEME_ID
    assert payload["appComponents"] == "components/default"


def test_activate_load_failure_never_stores() -> None:
    prefs = _FakePreferences(fail_load=PreferencesError("cannot read prefs"))
    manager = _manager(prefs, _FakeRegistry(THEMES))
    collector = _call(manager.activate_theme, ANYPOINT_THEME_ID)

    assert collector.responses[0].event == ThemeEvent.ERROR
    assert collector.responses[0].payload == {"message": "cannot read prefs"}
    assert prefs.store_calls == 0


def test_activate_store_failure_reports_error() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID}, fail_store=PreferencesError("read-only"))
    manager = _manager(prefs, _FakeRegistry(THEMES))
    collector = _call(manager.activate_theme, ANYPOINT_THEME_ID)

    assert len(collector.responses) == 1
    assert collector.responses[0].payload == {"message": "read-only"}
    assert prefs.persisted == {"theme": DEFAULT_THEME_ID}
    # Config is never recomputed after a failed store.
    assert prefs.load_calls == 1


def test_activate_registry_failure_after_store() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(fail=ThemeRegistryError("registry missing")))
    collector = _call(manager.activate_theme, ANYPOINT_THEME_ID)

    assert collector.responses[0].event == ThemeEvent.ERROR
    assert prefs.persisted == {"theme": ANYPOINT_THEME_ID}


def test_activate_stores_before_config_is_resolved() -> None:
    events: list[str] = []

    class _OrderedPreferences(_FakePreferences):
        async def load(self):
            events.append("load")
            return await super().load()

        async def store(self):
            await super().store()
            events.append("store")

    prefs = _OrderedPreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))
    _call(manager.activate_theme, ANYPOINT_THEME_ID)
    assert events == ["load", "store", "load"]


def test_channel_dispatch_and_unlisten() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))
    channel = EventChannel()
    manager.listen(channel)

    async def _run() -> ResponseCollector:
        collector = ResponseCollector()
        channel.emit(ThemeEvent.LIST_THEMES, collector, "a")
        channel.emit(ThemeEvent.ACTIVE_THEME_INFO, collector, "b")
        channel.emit(ThemeEvent.ACTIVATE_THEME, collector, "c", ANYPOINT_THEME_ID)
        activated = await collector.wait_for("c")
        assert activated.event == ThemeEvent.THEME_ACTIVATED
        await channel.drain()
        return collector

    collector = asyncio.run(_run())
    assert {r.request_id for r in collector.responses} == {"a", "b", "c"}
    assert all(not r.is_error for r in collector.responses)

    manager.unlisten(channel)
    assert channel.listener_count(ThemeEvent.LIST_THEMES) == 0
    assert channel.listener_count(ThemeEvent.ACTIVATE_THEME) == 0


def test_concurrent_activations_last_store_wins() -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES))

    async def _run() -> ResponseCollector:
        collector = ResponseCollector()
        await asyncio.gather(
            manager.activate_theme(collector, "first", ANYPOINT_THEME_ID),
            manager.activate_theme(collector, "second", DEFAULT_THEME_ID),
        )
        return collector

    collector = asyncio.run(_run())
    assert len(collector.responses) == 2
    assert prefs.persisted["theme"] in {ANYPOINT_THEME_ID, DEFAULT_THEME_ID}


def test_activation_log_names_layout(caplog: pytest.LogCaptureFixture) -> None:
    prefs = _FakePreferences({"theme": DEFAULT_THEME_ID})
    manager = _manager(prefs, _FakeRegistry(THEMES), config=SourcesConfig(app_root="", layout="single_folder"))
    with caplog.at_level(logging.INFO, logger="theme_sources.manager"):
        _call(manager.activate_theme, ANYPOINT_THEME_ID)
    assert any("layout: single_folder" in record.getMessage() for record in caplog.records)


def test_result_tags_drive_branching() -> None:
    manager = _manager(_FakePreferences(), _FakeRegistry(fail=ThemeRegistryError("gone")))
    failed = asyncio.run(manager.get_app_config())
    assert failed.ok is False
    assert failed.to_payload() == {"message": "gone"}

    manager = _manager(_FakePreferences(), _FakeRegistry(THEMES))
    loaded = asyncio.run(manager.get_app_config())
    assert loaded.ok is True
