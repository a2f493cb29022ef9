"""
Pytest 설정 및 공통 Fixture
"""

from pathlib import Path
from typing import Callable

import pytest

from propreload import ReloadableStore, ReloadOrchestrator, SourceWatcher, build_sources


class FakeMarkers:
    """경로별 수정 마커를 직접 지정하는 marker_fn

    지정되지 않은 경로는 FileNotFoundError (마커 조회 실패).
    """

    def __init__(self):
        self.markers: dict[Path, int] = {}
        self.calls = 0

    def set(self, path: Path, marker: int) -> None:
        self.markers[Path(path)] = marker

    def bump(self, path: Path) -> None:
        self.markers[Path(path)] = self.markers.get(Path(path), 0) + 1

    def __call__(self, path: Path) -> int:
        self.calls += 1
        try:
            return self.markers[Path(path)]
        except KeyError:
            raise FileNotFoundError(path) from None


class ListenerRecorder:
    """리스너 호출 순서 기록기"""

    def __init__(self):
        self.events: list[str] = []

    def callbacks(self, name: str, fail_pre: bool = False, fail_post: bool = False):
        def pre() -> None:
            self.events.append(f"{name}.pre")
            if fail_pre:
                raise RuntimeError(f"{name} pre 실패")

        def post() -> None:
            self.events.append(f"{name}.post")
            if fail_post:
                raise RuntimeError(f"{name} post 실패")

        return pre, post


@pytest.fixture
def write_properties(tmp_path: Path) -> Callable[..., Path]:
    """key=value 파일 작성 헬퍼

    사용법:
        path = write_properties("a.properties", foo="fooval")
    """

    def _write(name: str, text: str | None = None, **properties: str) -> Path:
        path = tmp_path / name
        if text is None:
            text = "".join(f"{key}={value}\n" for key, value in properties.items())
        path.write_text(text, encoding="iso-8859-1")
        return path

    return _write


@pytest.fixture
def fake_markers() -> FakeMarkers:
    return FakeMarkers()


@pytest.fixture
def recorder() -> ListenerRecorder:
    return ListenerRecorder()


@pytest.fixture
def store() -> ReloadableStore:
    return ReloadableStore()


@pytest.fixture
def two_sources(write_properties, fake_markers: FakeMarkers):
    """소스 A(foo=fooval), B(bar=barval) + 마커 1"""
    a = write_properties("a.properties", foo="fooval")
    b = write_properties("b.properties", bar="barval")
    fake_markers.set(a, 1)
    fake_markers.set(b, 1)
    return a, b


@pytest.fixture
def orchestrator(store: ReloadableStore, two_sources, fake_markers: FakeMarkers) -> ReloadOrchestrator:
    """A → B 순서 (B 우선) 오케스트레이터, 가짜 마커 사용"""
    return ReloadOrchestrator(
        store,
        build_sources(two_sources),
        watcher=SourceWatcher(marker_fn=fake_markers),
    )
