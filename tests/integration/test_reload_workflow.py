"""
리로드 워크플로우 통합 테스트

실제 파일, 실제 mtime, 데몬(Reloader), watchdog 트리거를 사용하는 시나리오.
"""

import os
import time

import pytest

from propreload import (
    FileChangeTrigger,
    ReloadableStore,
    ReloaderSettings,
    ReloadOrchestrator,
)
from reloader import CacheService, Reloader
from reloader.main import build_parser, settings_from_args


def touch(path, seconds: int) -> None:
    """mtime을 고정 값으로 지정 (파일시스템 해상도와 무관하게 증가 보장)"""
    os.utime(path, ns=(seconds * 1_000_000_000, seconds * 1_000_000_000))


class TestEndToEnd:
    """A(foo) + B(bar) 시나리오"""

    def test_rewrite_of_higher_precedence_source(self, write_properties):
        a = write_properties("a.properties", foo="fooval")
        b = write_properties("b.properties", bar="barval")
        touch(a, 1000)
        touch(b, 1000)

        store = ReloadableStore()
        orchestrator = ReloadOrchestrator.from_paths(store, [a, b])

        assert orchestrator.reload(force=True) is True
        assert store.read() == {"foo": "fooval", "bar": "barval"}
        assert orchestrator.reload() is False

        write_properties("b.properties", bar="newBarVal")
        touch(b, 2000)

        assert orchestrator.reload() is True
        assert store.read() == {"foo": "fooval", "bar": "newBarVal"}

    def test_older_mtime_after_rewrite_is_ignored(self, write_properties):
        """mtime이 과거로 돌아가면 변경으로 보지 않음"""
        a = write_properties("a.properties", foo="fooval")
        touch(a, 2000)
        store = ReloadableStore()
        orchestrator = ReloadOrchestrator.from_paths(store, [a])
        orchestrator.reload(force=True)

        write_properties("a.properties", foo="rewritten")
        touch(a, 1000)

        assert orchestrator.reload() is False
        assert store.read()["foo"] == "fooval"

    def test_deleted_optional_source_keeps_store(self, write_properties):
        """감시 중 파일이 사라지면 변경 없음 (경고만)"""
        a = write_properties("a.properties", foo="fooval")
        b = write_properties("b.properties", bar="barval")
        store = ReloadableStore()
        orchestrator = ReloadOrchestrator.from_paths(store, [a, b], ignore_not_found=True)
        orchestrator.reload(force=True)

        b.unlink()

        assert orchestrator.reload() is False
        assert store.read() == {"foo": "fooval", "bar": "barval"}
        assert orchestrator.reload(force=True) is True
        assert store.read() == {"foo": "fooval"}


class TestReloaderDaemon:
    """데몬 + 예제 소비자"""

    def test_daemon_lifecycle(self, write_properties):
        config = write_properties("app.properties", **{"cache.size": "5"})
        touch(config, 1000)
        settings = ReloaderSettings(
            sources=[str(config)], reload_interval=0, watch_files=False
        )

        reloader = Reloader(settings)
        reloader.start()
        cache = CacheService(reloader.store)

        assert cache.cachesize == 5
        assert reloader.store.version == 1

        write_properties("app.properties", **{"cache.size": "7"})
        touch(config, 2000)
        assert reloader.orchestrator.reload() is True
        assert cache.cachesize == 7

        reloader.shutdown()
        assert reloader.store.listeners == ()
        assert not reloader.running


class TestFileChangeTrigger:
    """watchdog 기반 실제 파일 감시"""

    def test_file_change_triggers_reload(self, write_properties):
        pytest.importorskip("watchdog")

        config = write_properties("app.properties", foo="fooval")
        touch(config, 1000)
        store = ReloadableStore()
        orchestrator = ReloadOrchestrator.from_paths(store, [config])
        orchestrator.reload(force=True)

        trigger = FileChangeTrigger(orchestrator, debounce_seconds=0.1)
        trigger.start()
        try:
            write_properties("app.properties", foo="changed")

            deadline = time.monotonic() + 10
            while time.monotonic() < deadline and store.read().get("foo") != "changed":
                time.sleep(0.05)
        finally:
            trigger.stop()

        assert store.read()["foo"] == "changed"


class TestCommandLine:
    """CLI 인자 → 설정"""

    def test_args_override_env(self, monkeypatch):
        monkeypatch.setenv("PROPRELOAD_SOURCES", "env.properties")
        monkeypatch.setenv("PROPRELOAD_RELOAD_INTERVAL", "30")

        args = build_parser().parse_args(
            ["--source", "a.properties", "--source", "b.properties", "--no-watch", "--port", "9000"]
        )
        settings = settings_from_args(args)

        assert settings.sources == ["a.properties", "b.properties"]
        assert settings.watch_files is False
        assert settings.reload_interval == 30.0
        assert settings.api_port == 9000

    def test_env_sources_used_without_args(self, monkeypatch):
        monkeypatch.setenv("PROPRELOAD_SOURCES", "x.properties, y.properties")

        settings = settings_from_args(build_parser().parse_args([]))

        assert settings.sources == ["x.properties", "y.properties"]
        assert settings.watch_files is True
