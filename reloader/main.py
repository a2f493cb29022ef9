"""
설정 리로드 데몬 메인 엔트리포인트

- 설정 소스 최초 강제 로드
- 주기적 폴링 + watchdog 파일 감시로 핫 리로드
- 선택적으로 관리 API 서버 실행
- 우아한 종료 처리

사용법:
    propreload-daemon --source config/defaults.properties --source config/local.properties
    python -m reloader.main --serve --port 8080
"""

import argparse
import logging
import os
import signal
import threading
from pathlib import Path

from dotenv import load_dotenv

from propreload import (
    FileChangeTrigger,
    PeriodicReloadTrigger,
    ReloadableStore,
    ReloaderSettings,
    ReloadOrchestrator,
)

from .consumer import CacheService

logger = logging.getLogger(__name__)


class Reloader:
    """설정 리로드 데몬

    저장소, 오케스트레이터, 트리거의 수명을 관리합니다.
    """

    def __init__(self, settings: ReloaderSettings):
        """
        Args:
            settings: 리로더 설정
        """
        self.settings = settings
        self.store = ReloadableStore()
        self.orchestrator = ReloadOrchestrator.from_paths(
            self.store,
            settings.sources,
            ignore_not_found=settings.ignore_missing,
            encoding=settings.encoding,
        )
        self.triggers: list[PeriodicReloadTrigger | FileChangeTrigger] = []
        self._stop_event = threading.Event()

        logger.info(f"[Reloader] 초기화 완료: 소스 {len(settings.sources)}개")

    @property
    def running(self) -> bool:
        return bool(self.triggers) and not self._stop_event.is_set()

    def start(self) -> None:
        """최초 강제 리로드 후 트리거 시작

        Raises:
            ReloadableConfigError: 최초 로드 실패
        """
        self._stop_event.clear()
        self.orchestrator.reload(force=True)

        if self.settings.reload_interval > 0:
            self.triggers.append(
                PeriodicReloadTrigger(self.orchestrator, self.settings.reload_interval)
            )
        if self.settings.watch_files:
            self.triggers.append(
                FileChangeTrigger(self.orchestrator, self.settings.debounce_seconds)
            )

        for trigger in self.triggers:
            trigger.start()

        logger.info(f"[Reloader] 시작: 설정 v{self.store.version}, 트리거 {len(self.triggers)}개")

    def wait(self) -> None:
        """종료 신호까지 대기"""
        while not self._stop_event.wait(1.0):
            pass

    def shutdown(self) -> None:
        """우아한 종료"""
        if self._stop_event.is_set():
            return
        logger.info("[Reloader] 종료 신호 수신, 우아한 종료 시작...")
        self._stop_event.set()

        for trigger in self.triggers:
            trigger.stop()
        self.triggers = []
        self.store.close()

        logger.info("[Reloader] 종료 완료")


# ============================================================================
# 엔트리포인트
# ============================================================================


def setup_logging(level: str = "INFO") -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_env_file(env: str, root: Path | None = None) -> Path | None:
    """환경별 .env 파일 로드 (먼저 찾은 하나만)"""
    root = root or Path.cwd()
    for env_file in (root / f".env.{env}", root / ".env.local", root / ".env"):
        if env_file.exists():
            load_dotenv(env_file)
            return env_file
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="핫 리로드 설정 데몬",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
    # 소스 두 개 (뒤 소스가 우선)
    propreload-daemon --source config/defaults.properties --source config/local.properties

    # 관리 API 함께 실행
    propreload-daemon --serve --port 8080
        """,
    )
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default=None,
        help="실행 환경 (기본: 환경변수 ENV 또는 dev)",
    )
    parser.add_argument(
        "--source",
        action="append",
        default=None,
        help="설정 파일 경로 (반복 가능, 기본: 환경변수 PROPRELOAD_SOURCES)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="주기적 확인 간격 (초, 0이면 비활성)",
    )
    parser.add_argument(
        "--watch",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="watchdog 파일 감시 사용 여부",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="관리 API 서버 함께 실행",
    )
    parser.add_argument("--host", default=None, help="관리 API 바인딩 호스트")
    parser.add_argument("--port", type=int, default=None, help="관리 API 바인딩 포트")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="로그 레벨",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ReloaderSettings:
    """환경변수 설정에 CLI 인자 덮어쓰기"""
    settings = ReloaderSettings.from_env()
    if args.source:
        settings.sources = args.source
    if args.interval is not None:
        settings.reload_interval = args.interval
    if args.watch is not None:
        settings.watch_files = args.watch
    if args.host:
        settings.api_host = args.host
    if args.port:
        settings.api_port = args.port
    return settings


def run(argv: list[str] | None = None) -> None:
    """데몬 실행 (엔트리포인트)"""
    args = build_parser().parse_args(argv)

    env = args.env or os.getenv("ENV", "dev")
    os.environ["ENV"] = env
    env_file = load_env_file(env)

    setup_logging(args.log_level or ("DEBUG" if env == "dev" else "INFO"))
    if env_file:
        logger.info(f"[Config] 환경 파일 로드: {env_file}")

    settings = settings_from_args(args)
    settings.validate(strict=True)

    reloader = Reloader(settings)
    reloader.start()

    # 예제 소비자
    cache = CacheService(reloader.store, resolver=settings.build_resolver())
    logger.info(f"[Reloader] 예제 캐시 크기: {cache.cachesize}")

    try:
        if args.serve:
            import uvicorn

            from admin_api.dependencies import set_orchestrator, set_settings
            from admin_api.server import create_app

            set_settings(settings)
            set_orchestrator(reloader.orchestrator)
            uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port)
        else:
            for sig in (signal.SIGINT, signal.SIGTERM):
                signal.signal(sig, lambda s, f: reloader.shutdown())
            reloader.wait()
    except KeyboardInterrupt:
        logger.info("[Reloader] KeyboardInterrupt 수신, 종료 중...")
    finally:
        reloader.shutdown()


if __name__ == "__main__":
    run()
