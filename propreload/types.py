"""
공용 타입 정의

설정 스냅샷, 소스 디스크립터, 리로드 상태 Enum.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .loaders import SourceLoader


class ConfigurationMapping(Mapping[str, str]):
    """불변 설정 스냅샷 (key → value)

    리로드 성공 시마다 새로 생성되며, 게시된 이후에는 절대 변경되지 않습니다.
    dict 및 다른 Mapping과 내용 기준으로 비교됩니다.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()):
        self._data: dict[str, str] = {str(k): str(v) for k, v in dict(data).items()}

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ConfigurationMapping({self._data!r})"

    def to_dict(self) -> dict[str, str]:
        """변경 가능한 사본 반환"""
        return dict(self._data)


EMPTY = ConfigurationMapping()


class ReloadState(str, Enum):
    """리로드 사이클 상태"""

    IDLE = "idle"
    CHECKING = "checking"  # 변경 감지 중
    LOADING = "loading"  # 소스 읽기 중
    MERGING = "merging"  # 우선순위 병합 중
    COMMITTING = "committing"  # 저장소 교체 + 리스너 알림


@dataclass
class SourceDescriptor:
    """감시 대상 설정 소스

    rank가 클수록 우선순위가 높습니다 (나중 소스가 같은 키를 덮어씀).
    last_seen은 SourceWatcher만 갱신합니다.
    """

    path: Path
    rank: int = 0
    ignore_not_found: bool = False
    encoding: str | None = None
    loader: "SourceLoader | None" = None
    last_seen: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __str__(self) -> str:
        return str(self.path)


def build_sources(
    paths: Iterable[str | Path],
    ignore_not_found: bool = False,
    encoding: str | None = None,
) -> list[SourceDescriptor]:
    """경로 목록 → 우선순위가 매겨진 SourceDescriptor 목록

    Args:
        paths: 설정 파일 경로 (앞 → 뒤 순서로 우선순위 증가)
        ignore_not_found: 파일이 없으면 건너뛸지 여부
        encoding: 텍스트 인코딩 강제 지정

    Returns:
        rank가 목록 위치와 같은 SourceDescriptor 리스트
    """
    return [
        SourceDescriptor(
            path=Path(path),
            rank=rank,
            ignore_not_found=ignore_not_found,
            encoding=encoding,
        )
        for rank, path in enumerate(paths)
    ]
