"""
리로드 오케스트레이터

SourceWatcher와 ReloadableStore를 조합하여 리로드 사이클을 실행합니다.

사이클:
    IDLE → CHECKING → LOADING → MERGING → COMMITTING → IDLE

어느 단계에서 실패하든 저장소 내용과 감시 마커는 사이클 시작 전 그대로 남습니다.
동시에 들어온 reload 호출은 진행 중인 사이클이 끝날 때까지 대기합니다.

사용법:
    ```python
    store = ReloadableStore()
    orchestrator = ReloadOrchestrator.from_paths(
        store, ["config/defaults.properties", "config/local.properties"]
    )
    orchestrator.reload(force=True)

    # 타이머, 파일 이벤트, 관리 API 등에서
    changed = orchestrator.reload()
    ```
"""

import logging
import threading
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from .errors import (
    ListenerPostFailureError,
    SourceReadError,
    SourceUnavailableError,
)
from .loaders import select_loader
from .source_watcher import SourceWatcher
from .store import ReloadableStore
from .types import ConfigurationMapping, ReloadState, SourceDescriptor, build_sources

logger = logging.getLogger(__name__)


class ReloadOrchestrator:
    """리로드 오케스트레이터

    소스 목록의 순서가 곧 우선순위입니다 (나중 소스가 이김).
    """

    def __init__(
        self,
        store: ReloadableStore,
        sources: Sequence[SourceDescriptor],
        watcher: SourceWatcher | None = None,
    ):
        """
        Args:
            store: 결과를 게시할 저장소
            sources: 우선순위 순서의 소스 목록
            watcher: 변경 감지기 (None이면 파일 mtime 기반 기본값)
        """
        self.store = store
        self._sources = sorted(sources, key=lambda source: source.rank)
        self.watcher = watcher or SourceWatcher()
        self._lock = threading.Lock()
        self._state = ReloadState.IDLE
        self._reload_count = 0
        self._last_reload_at: datetime | None = None

    @classmethod
    def from_paths(
        cls,
        store: ReloadableStore,
        paths: Iterable[str | Path],
        ignore_not_found: bool = False,
        encoding: str | None = None,
        watcher: SourceWatcher | None = None,
    ) -> "ReloadOrchestrator":
        """경로 목록으로 생성"""
        return cls(
            store,
            build_sources(paths, ignore_not_found=ignore_not_found, encoding=encoding),
            watcher=watcher,
        )

    @property
    def sources(self) -> tuple[SourceDescriptor, ...]:
        return tuple(self._sources)

    @property
    def state(self) -> ReloadState:
        return self._state

    @property
    def reload_count(self) -> int:
        """성공한 리로드 횟수"""
        return self._reload_count

    @property
    def last_reload_at(self) -> datetime | None:
        return self._last_reload_at

    def reload(self, force: bool = False) -> bool:
        """리로드 사이클 실행

        Args:
            force: True면 변경 감지 없이 무조건 리로드

        Returns:
            실제로 리로드가 일어났는지 여부

        Raises:
            SourceUnavailableError: 필수 소스 없음
            SourceReadError: 소스 읽기 실패
            ListenerPreFailureError: pre 콜백 실패
            ListenerPostFailureError: post 콜백 실패 (게시는 완료됨)
        """
        with self._lock:
            try:
                self._state = ReloadState.CHECKING
                markers = self.watcher.snapshot(self._sources)
                if not force and not self.watcher.has_changed(self._sources, markers):
                    logger.debug("[ReloadOrchestrator] 변경 없음 - 리로드 생략")
                    return False

                logger.info(
                    f"[ReloadOrchestrator] 설정 리로드 시작: "
                    f"{len(self._sources)}개 소스 (force={force})"
                )

                merged = self._load_and_merge()

                self._state = ReloadState.COMMITTING
                try:
                    self.store.replace(merged)
                except ListenerPostFailureError:
                    # 게시 완료 → 같은 소스 상태로 다시 리로드하지 않도록 마커 기록
                    self._record_success(markers)
                    raise

                self._record_success(markers)
                logger.info(
                    f"[ReloadOrchestrator] 설정 리로드 완료: "
                    f"v{self.store.version}, {len(merged)}개 키"
                )
                return True

            except Exception as e:
                logger.error(f"[ReloadOrchestrator] 설정 리로드 실패: {e}")
                raise
            finally:
                self._state = ReloadState.IDLE

    def _record_success(self, markers: Sequence[int | None]) -> None:
        self.watcher.commit(self._sources, markers)
        self._reload_count += 1
        self._last_reload_at = datetime.now(timezone.utc)

    def _load_and_merge(self) -> ConfigurationMapping:
        """우선순위 순서로 로드 후 병합 (나중 소스가 같은 키를 덮어씀)"""
        merged: dict[str, str] = {}
        for source in self._sources:
            self._state = ReloadState.LOADING
            properties = self._load_source(source)
            if properties is None:
                continue

            self._state = ReloadState.MERGING
            merged.update(properties)

        return ConfigurationMapping(merged)

    def _load_source(self, source: SourceDescriptor) -> dict[str, str] | None:
        """단일 소스 로드

        Returns:
            key → value 딕셔너리 또는 None (없는 소스를 무시한 경우)
        """
        loader = source.loader or select_loader(source.path)
        logger.info(f"[ReloadOrchestrator] 설정 파일 로드: {source}")

        try:
            return loader.load(source.path, source.encoding)
        except FileNotFoundError as e:
            if source.ignore_not_found:
                logger.warning(f"[ReloadOrchestrator] 설정 파일 없음, 건너뜀: {source}")
                return None
            raise SourceUnavailableError(source) from e
        except Exception as e:
            raise SourceReadError(source, e) from e
