"""
예제 소비자: 설정 크기의 캐시

`${cache.size=100}`로 크기가 정해지는 캐시입니다.
리로드 직전에 캐시를 비우고, 리로드 직후 새 크기로 다시 만듭니다.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any

from propreload import LiveSetting, PlaceholderResolver, ReloadableStore

logger = logging.getLogger(__name__)

CACHE_SIZE_TEMPLATE = "${cache.size=100}"


class CacheService:
    """설정 크기 LRU 캐시 (ReconfigurationAware)"""

    def __init__(
        self,
        store: ReloadableStore,
        resolver: PlaceholderResolver | None = None,
        template: str = CACHE_SIZE_TEMPLATE,
    ):
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._paused = False
        self.cachesize = 0

        # 등록 순서: before/after 훅 → 크기 바인딩
        store.register_aware(self)
        self.size_setting = LiveSetting(
            store,
            template,
            setter=self._set_cachesize,
            resolver=resolver,
            converter=int,
            name="cache.size",
        )

    def _set_cachesize(self, cachesize: int) -> None:
        logger.info(f"[CacheService] 캐시 크기 설정: {cachesize}")
        with self._lock:
            self.cachesize = cachesize
            while len(self._entries) > cachesize:
                self._entries.popitem(last=False)

    def before_reconfiguration(self) -> None:
        """리로드 직전: 신규 적재 중단 후 캐시 비움"""
        with self._lock:
            self._paused = True
            self._entries.clear()
        logger.debug("[CacheService] 리로드 대기: 캐시 비움")

    def after_reconfiguration(self) -> None:
        """리로드 직후: 적재 재개"""
        with self._lock:
            self._paused = False
        logger.debug("[CacheService] 리로드 완료: 적재 재개")

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            if self._paused or self.cachesize <= 0:
                return
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.cachesize:
                self._entries.popitem(last=False)

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
