"""
설정 소스 변경 감지

소스별 수정 마커(파일 mtime)를 마지막으로 본 값과 비교합니다.
마커를 얻지 못하면 (파일 없음, 일시적 I/O 장애) 변경 없음으로 간주하고
경고만 남깁니다.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Callable

from .types import SourceDescriptor

logger = logging.getLogger(__name__)

Marker = int
MarkerFn = Callable[[Path], Marker]


def file_marker(path: Path) -> Marker:
    """파일 수정 시각 (나노초)"""
    return os.stat(path).st_mtime_ns


class SourceWatcher:
    """소스 변경 감지기

    마커는 엄격히 증가할 때만 변경으로 인정합니다.
    같거나 작은 마커 (시계 역행 포함)는 변경 없음입니다.
    """

    def __init__(self, marker_fn: MarkerFn = file_marker):
        """
        Args:
            marker_fn: 경로 → 비교 가능한 수정 마커
        """
        self._marker_fn = marker_fn
        self._primed = False

    @property
    def primed(self) -> bool:
        """첫 리로드 커밋 완료 여부"""
        return self._primed

    def observe(self, source: SourceDescriptor) -> Marker | None:
        """현재 마커 조회

        Returns:
            마커 또는 None (조회 실패)
        """
        try:
            return self._marker_fn(source.path)
        except Exception as e:
            logger.warning(
                f"[SourceWatcher] 수정 시각 확인 불가, 변경 없음으로 간주: {source} - {e}"
            )
            return None

    def snapshot(self, sources: Sequence[SourceDescriptor]) -> list[Marker | None]:
        """모든 소스의 현재 마커"""
        return [self.observe(source) for source in sources]

    @staticmethod
    def is_newer(source: SourceDescriptor, marker: Marker | None) -> bool:
        """마커가 마지막으로 본 값보다 엄격히 큰지"""
        if marker is None:
            return False
        if source.last_seen is None:
            return True
        return marker > source.last_seen

    def has_changed(
        self,
        sources: Sequence[SourceDescriptor],
        markers: Sequence[Marker | None] | None = None,
    ) -> bool:
        """하나라도 변경되었거나 첫 확인이면 True

        Args:
            sources: 감시 대상 소스
            markers: 미리 조회한 마커 (None이면 여기서 조회)
        """
        if markers is None:
            markers = self.snapshot(sources)

        if not self._primed:
            logger.debug("[SourceWatcher] 첫 확인 - 강제 리로드")
            return True

        changed = [
            source for source, marker in zip(sources, markers)
            if self.is_newer(source, marker)
        ]
        for source in changed:
            logger.debug(f"[SourceWatcher] 변경 감지: {source}")
        return bool(changed)

    def mark_seen(self, source: SourceDescriptor, marker: Marker | None) -> None:
        """마커 기록 (None이면 기존 값 유지)"""
        if marker is not None:
            source.last_seen = marker

    def commit(
        self,
        sources: Sequence[SourceDescriptor],
        markers: Sequence[Marker | None],
    ) -> None:
        """리로드 성공 후 모든 소스의 마커 기록"""
        for source, marker in zip(sources, markers):
            self.mark_seen(source, marker)
        self._primed = True
