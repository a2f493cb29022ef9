"""
리로드 트리거 테스트

주기적 트리거와 파일 감시 트리거의 디바운스/실패 처리 테스트.
"""

import logging
import threading
from unittest.mock import MagicMock

import pytest

from propreload import (
    FileChangeTrigger,
    PeriodicReloadTrigger,
    SourceReadError,
    SourceUnavailableError,
    build_sources,
)


@pytest.fixture
def mock_orchestrator(tmp_path):
    """Mock 오케스트레이터"""
    orchestrator = MagicMock()
    orchestrator.sources = tuple(build_sources([tmp_path / "a.properties"]))
    orchestrator.reload.return_value = True
    return orchestrator


class TestPeriodicReloadTrigger:
    """PeriodicReloadTrigger 테스트"""

    def test_trigger_now_calls_unforced_reload(self, mock_orchestrator):
        trigger = PeriodicReloadTrigger(mock_orchestrator, interval_seconds=60)

        assert trigger.trigger_now() is True
        mock_orchestrator.reload.assert_called_once_with(force=False)

    def test_failure_is_logged_not_raised(self, mock_orchestrator, caplog):
        """재시도 가능 실패는 경고"""
        mock_orchestrator.reload.side_effect = SourceReadError("a.properties", OSError("EBUSY"))
        trigger = PeriodicReloadTrigger(mock_orchestrator, interval_seconds=60)

        with caplog.at_level(logging.WARNING):
            assert trigger.trigger_now() is False

        assert any(
            record.levelno == logging.WARNING and "재시도" in record.getMessage()
            for record in caplog.records
        )

    def test_non_retryable_failure_logged_as_error(self, mock_orchestrator, caplog):
        mock_orchestrator.reload.side_effect = SourceUnavailableError("a.properties")
        trigger = PeriodicReloadTrigger(mock_orchestrator, interval_seconds=60)

        with caplog.at_level(logging.WARNING):
            trigger.trigger_now()

        assert any(record.levelno == logging.ERROR for record in caplog.records)

    def test_loop_polls_until_stopped(self, mock_orchestrator):
        called = threading.Event()
        mock_orchestrator.reload.side_effect = lambda force: called.set() or False
        trigger = PeriodicReloadTrigger(mock_orchestrator, interval_seconds=0.01)

        trigger.start()
        try:
            assert called.wait(5)
            assert trigger.running
        finally:
            trigger.stop(timeout=5)

        assert not trigger.running

    def test_invalid_interval(self, mock_orchestrator):
        with pytest.raises(ValueError):
            PeriodicReloadTrigger(mock_orchestrator, interval_seconds=0)


class TestFileChangeTrigger:
    """FileChangeTrigger 테스트"""

    def test_is_watched(self, mock_orchestrator, tmp_path):
        trigger = FileChangeTrigger(mock_orchestrator)

        assert trigger.is_watched(str(tmp_path / "a.properties"))
        assert not trigger.is_watched(str(tmp_path / "other.properties"))

    def test_debounce_collapses_events(self, mock_orchestrator):
        """연속 이벤트 → 리로드 한 번"""
        done = threading.Event()
        mock_orchestrator.reload.side_effect = lambda force: done.set() or True
        trigger = FileChangeTrigger(mock_orchestrator, debounce_seconds=0.05)

        for _ in range(5):
            trigger.schedule_reload()

        assert done.wait(5)
        trigger.stop()
        mock_orchestrator.reload.assert_called_once_with(force=False)

    def test_stop_cancels_pending_reload(self, mock_orchestrator):
        trigger = FileChangeTrigger(mock_orchestrator, debounce_seconds=10)
        trigger.schedule_reload()
        trigger.stop()

        mock_orchestrator.reload.assert_not_called()

    def test_start_and_stop_observer(self, mock_orchestrator):
        trigger = FileChangeTrigger(mock_orchestrator, debounce_seconds=0.05)
        trigger.start()
        trigger.stop()

        mock_orchestrator.reload.assert_not_called()
