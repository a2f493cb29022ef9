"""
라이브 설정 바인딩

템플릿 값(`${cache.size=100}` 등)을 저장소 기준으로 해석하여 setter에 주입하고,
리로드될 때마다 값이 바뀐 경우에만 다시 주입합니다.
"""

import logging
from typing import Any, Callable

from .placeholder import PlaceholderResolver
from .store import ReloadableStore

logger = logging.getLogger(__name__)


class LiveSetting:
    """저장소에 연결된 설정 값

    사용법:
        ```python
        setting = LiveSetting(store, "${cache.size=100}", cache.resize, converter=int)
        setting.value  # 100 (또는 저장소 값)
        ```
    """

    def __init__(
        self,
        store: ReloadableStore,
        template: str,
        setter: Callable[[Any], None] | None = None,
        resolver: PlaceholderResolver | None = None,
        converter: Callable[[str], Any] = str,
        name: str | None = None,
    ):
        """
        Args:
            store: 설정 저장소
            template: 플레이스홀더가 포함된 템플릿 문자열
            setter: 값 주입 함수 (None이면 value 속성으로만 조회)
            resolver: 플레이스홀더 해석기 (None이면 기본 문법)
            converter: 문자열 → 대상 타입 변환 함수
            name: 리스너 식별 이름

        Raises:
            UnresolvedPlaceholderError: 초기 해석 실패
        """
        self.store = store
        self.template = template
        self.setter = setter
        self.resolver = resolver or PlaceholderResolver()
        self.converter = converter
        self.name = name or template

        self._value = self._resolve()
        if self.setter is not None:
            self.setter(self._value)

        store.register_listener(post=self.refresh, name=f"LiveSetting({self.name})")

    @property
    def value(self) -> Any:
        return self._value

    def _resolve(self) -> Any:
        raw = self.resolver.substitute(self.template, self.store.lookup)
        return self.converter(raw)

    def refresh(self) -> bool:
        """현재 저장소 기준으로 다시 해석

        Returns:
            값이 바뀌어 다시 주입했는지 여부
        """
        value = self._resolve()
        if value == self._value:
            return False

        logger.info(f"[LiveSetting] 값 변경: {self.name} = {value!r}")
        self._value = value
        if self.setter is not None:
            self.setter(value)
        return True
