"""
리로드 가능한 설정 저장소

현재 게시된 ConfigurationMapping 하나와 순서가 있는 리스너 목록을 보관합니다.

설계 원칙:
- 읽기는 락 없이 단일 참조만 읽음 (리로드 중에도 블로킹 없음)
- 교체는 pre 알림 → 참조 교체 → post 알림 순서로 직렬화
- pre 알림 실패 시 전체 중단 (게시 안 함)
- post 알림 실패 시 게시는 유지, 실패만 호출자에게 전달

사용법:
    ```python
    store = ReloadableStore()
    store.register_listener(pool.drain, pool.resize, name="pool")
    store.replace(ConfigurationMapping({"pool.size": "10"}))

    store.read()["pool.size"]
    ```
"""

import logging
import threading
from collections.abc import Mapping
from typing import Callable, NamedTuple, Protocol, runtime_checkable

from .errors import ListenerPostFailureError, ListenerPreFailureError
from .types import EMPTY, ConfigurationMapping

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


@runtime_checkable
class ReconfigurationAware(Protocol):
    """리로드 전후 알림을 받는 컴포넌트"""

    def before_reconfiguration(self) -> None:
        """설정 교체 직전 호출 (예외 발생 시 리로드 중단)"""
        ...

    def after_reconfiguration(self) -> None:
        """설정 교체 직후 호출"""
        ...


class ListenerRegistration(NamedTuple):
    """등록된 리스너 (식별 이름 + 두 콜백)"""

    name: str
    pre: Callback | None
    post: Callback | None


class ReloadableStore:
    """설정 저장소

    명시적으로 소유되는 인스턴스이며 전역 싱글톤이 아닙니다.
    필요한 컴포넌트에 참조로 전달합니다.
    """

    def __init__(self, initial: Mapping[str, str] | None = None):
        """
        Args:
            initial: 초기 매핑 (None이면 빈 매핑)
        """
        self._mapping: ConfigurationMapping = self._freeze(initial)
        self._listeners: tuple[ListenerRegistration, ...] = ()
        self._lock = threading.RLock()
        self._version = 0

    @staticmethod
    def _freeze(mapping: Mapping[str, str] | None) -> ConfigurationMapping:
        if mapping is None:
            return EMPTY
        if isinstance(mapping, ConfigurationMapping):
            return mapping
        return ConfigurationMapping(mapping)

    # ------------------------------------------------------------------
    # 읽기 API
    # ------------------------------------------------------------------

    def read(self) -> ConfigurationMapping:
        """현재 게시된 매핑 반환 (락 없음)"""
        return self._mapping

    def get(self, key: str, default: str | None = None) -> str | None:
        """단일 키 조회"""
        return self._mapping.get(key, default)

    def lookup(self, key: str) -> str | None:
        """PlaceholderResolver용 조회 함수"""
        return self._mapping.get(key)

    @property
    def version(self) -> int:
        """게시 횟수 (교체 성공 시마다 1 증가)"""
        return self._version

    @property
    def listeners(self) -> tuple[ListenerRegistration, ...]:
        """등록 순서대로 정렬된 리스너 목록"""
        return self._listeners

    # ------------------------------------------------------------------
    # 리스너 등록
    # ------------------------------------------------------------------

    def register_listener(
        self,
        pre: Callback | None = None,
        post: Callback | None = None,
        name: str | None = None,
    ) -> ListenerRegistration:
        """리스너 등록 (등록 순서 = 알림 순서)

        이미 지난 교체에 대한 재생은 없습니다.

        Args:
            pre: 교체 직전 콜백
            post: 교체 직후 콜백
            name: 로그/에러용 식별 이름

        Returns:
            등록 정보
        """
        if pre is None and post is None:
            raise ValueError("pre, post 중 하나는 지정해야 합니다")

        with self._lock:
            registration = ListenerRegistration(
                name=name or f"listener-{len(self._listeners) + 1}",
                pre=pre,
                post=post,
            )
            self._listeners = self._listeners + (registration,)

        logger.debug(f"[ReloadableStore] 리스너 등록: {registration.name}")
        return registration

    def register_aware(
        self, component: ReconfigurationAware, name: str | None = None
    ) -> ListenerRegistration:
        """ReconfigurationAware 컴포넌트 등록"""
        return self.register_listener(
            component.before_reconfiguration,
            component.after_reconfiguration,
            name=name or type(component).__name__,
        )

    # ------------------------------------------------------------------
    # 교체
    # ------------------------------------------------------------------

    def replace(self, mapping: Mapping[str, str]) -> None:
        """알림과 함께 매핑 교체

        1. 모든 pre 콜백 (등록 순서)
        2. 참조 교체로 새 매핑 게시
        3. 모든 post 콜백 (등록 순서)

        Args:
            mapping: 새 설정 매핑

        Raises:
            ListenerPreFailureError: pre 콜백 실패 (게시 안 됨, post 호출 안 됨)
            ListenerPostFailureError: post 콜백 실패 (게시는 완료됨)
        """
        new_mapping = self._freeze(mapping)

        with self._lock:
            listeners = self._listeners

            for listener in listeners:
                if listener.pre is None:
                    continue
                try:
                    listener.pre()
                except Exception as e:
                    logger.error(
                        f"[ReloadableStore] pre 콜백 실패, 교체 중단: {listener.name} - {e}"
                    )
                    raise ListenerPreFailureError(listener.name, e) from e

            self._mapping = new_mapping
            self._version += 1
            logger.info(
                f"[ReloadableStore] 설정 게시 완료: v{self._version}, {len(new_mapping)}개 키"
            )

            for listener in listeners:
                if listener.post is None:
                    continue
                try:
                    listener.post()
                except Exception as e:
                    logger.error(
                        f"[ReloadableStore] post 콜백 실패 (게시 유지): {listener.name} - {e}"
                    )
                    raise ListenerPostFailureError(listener.name, e) from e

    def close(self) -> None:
        """리스너 참조 해제"""
        with self._lock:
            self._listeners = ()
        logger.debug("[ReloadableStore] 리스너 해제 완료")
