"""
리로드 트리거

ReloadOrchestrator.reload()를 호출하는 외부 계기:
- PeriodicReloadTrigger: 주기적 폴링 (스레드)
- FileChangeTrigger: watchdog 파일 이벤트 + 디바운스

두 트리거 모두 최상위 루프이므로 리로드 실패를 로그로 남기고 계속 동작합니다.

사용법:
    ```python
    trigger = FileChangeTrigger(orchestrator)
    trigger.start()

    # 앱 종료 시
    trigger.stop()
    ```
"""

import logging
import threading
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import ErrorCategory, ErrorClassifier
from .orchestrator import ReloadOrchestrator

logger = logging.getLogger(__name__)


def _run_reload(orchestrator: ReloadOrchestrator, tag: str) -> bool:
    """reload(False) 실행, 실패는 분류 후 로그"""
    try:
        return orchestrator.reload(force=False)
    except Exception as e:
        message = ErrorClassifier.format_message(e)
        if ErrorClassifier.classify(e) == ErrorCategory.RETRYABLE:
            logger.warning(f"[{tag}] 리로드 실패, 다음 주기에 재시도: {message}")
        else:
            logger.error(f"[{tag}] 리로드 실패: {message}")
        return False


class PeriodicReloadTrigger:
    """주기적 리로드 트리거

    interval_seconds마다 변경 여부를 확인하고, 변경 시에만 리로드합니다.
    """

    def __init__(self, orchestrator: ReloadOrchestrator, interval_seconds: float = 10.0):
        """
        Args:
            orchestrator: 리로드 오케스트레이터
            interval_seconds: 확인 주기 (초)
        """
        if interval_seconds <= 0:
            raise ValueError(f"잘못된 주기: {interval_seconds}")
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """폴링 스레드 시작"""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="propreload-periodic", daemon=True
        )
        self._thread.start()
        logger.info(f"[PeriodicReload] 폴링 시작: {self.interval_seconds}초 주기")

    def stop(self, timeout: float | None = None) -> None:
        """폴링 스레드 중지"""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("[PeriodicReload] 폴링 중지")

    def trigger_now(self) -> bool:
        """주기와 무관하게 즉시 한 번 확인"""
        return _run_reload(self.orchestrator, "PeriodicReload")

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.trigger_now()


class _SourceEventHandler(FileSystemEventHandler):
    """감시 대상 파일 이벤트만 걸러 리로드 예약"""

    def __init__(self, trigger: "FileChangeTrigger"):
        super().__init__()
        self.trigger = trigger

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in ("modified", "created", "moved"):
            return

        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(path and self.trigger.is_watched(path) for path in paths):
            logger.debug(f"[FileChangeTrigger] 파일 변경 감지: {event.src_path}")
            self.trigger.schedule_reload()


class FileChangeTrigger:
    """파일 시스템 감시 기반 핫 리로드

    소스 파일의 상위 디렉토리를 감시하고, 이벤트가 몰리면
    마지막 이벤트 후 debounce_seconds가 지나서 한 번만 리로드합니다.
    """

    def __init__(self, orchestrator: ReloadOrchestrator, debounce_seconds: float = 2.0):
        """
        Args:
            orchestrator: 리로드 오케스트레이터
            debounce_seconds: 디바운스 시간 (초)
        """
        self.orchestrator = orchestrator
        self.debounce_seconds = debounce_seconds
        self._watched = {
            Path(source.path).resolve() for source in orchestrator.sources
        }
        self._observer: Observer | None = None
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()

    def is_watched(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() in self._watched

    def start(self) -> None:
        """파일 감시 시작"""
        if self._observer is not None:
            return

        handler = _SourceEventHandler(self)
        self._observer = Observer()

        watched_dirs = sorted({str(path.parent) for path in self._watched if path.parent.exists()})
        for dir_path in watched_dirs:
            self._observer.schedule(handler, dir_path, recursive=False)

        self._observer.start()
        logger.info(f"[FileChangeTrigger] 파일 감시 시작: {watched_dirs}")

    def stop(self) -> None:
        """파일 감시 중지"""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("[FileChangeTrigger] 파일 감시 중지")

    def schedule_reload(self) -> None:
        """디바운스 후 리로드 예약 (이전 예약은 취소)"""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._debounced_reload)
            self._timer.daemon = True
            self._timer.start()

    def _debounced_reload(self) -> None:
        with self._timer_lock:
            self._timer = None
        logger.info("[FileChangeTrigger] 설정 리로드 실행")
        _run_reload(self.orchestrator, "FileChangeTrigger")
