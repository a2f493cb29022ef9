"""
FastAPI 앱 정의 및 라우터 통합

라이브 설정 관리 API 서버의 메인 모듈입니다.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from propreload import (
    FileChangeTrigger,
    PeriodicReloadTrigger,
    ReloadableStore,
    ReloadOrchestrator,
)

from .dependencies import get_orchestrator, get_settings, set_orchestrator, set_store
from .routes import config_router, health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """앱 라이프사이클 관리

    시작 시:
        - 오케스트레이터가 주입되지 않았으면 설정으로 생성
        - 최초 강제 리로드
        - 주기/파일 감시 트리거 시작

    종료 시:
        - 트리거 중지
    """
    settings = get_settings()
    triggers: list[PeriodicReloadTrigger | FileChangeTrigger] = []

    orchestrator = get_orchestrator()
    if orchestrator is None:
        store = ReloadableStore()
        orchestrator = ReloadOrchestrator.from_paths(
            store,
            settings.sources,
            ignore_not_found=settings.ignore_missing,
            encoding=settings.encoding,
        )
        set_store(store)
        set_orchestrator(orchestrator)

        try:
            await run_in_threadpool(orchestrator.reload, True)
            logger.info(f"[Server] 설정 초기 로드 완료: v{store.version}")
        except Exception as e:
            logger.warning(f"[Server] 설정 초기 로드 실패: {e}")

        if settings.reload_interval > 0:
            triggers.append(PeriodicReloadTrigger(orchestrator, settings.reload_interval))
        if settings.watch_files:
            triggers.append(FileChangeTrigger(orchestrator, settings.debounce_seconds))

    for trigger in triggers:
        trigger.start()

    yield

    for trigger in triggers:
        trigger.stop()
    logger.info("[Server] 서버 종료")


def create_app(
    title: str = "Reloadable Config Admin API",
    version: str = "1.0.0",
    debug: bool = False,
) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        title: API 제목
        version: API 버전
        debug: 디버그 모드

    Returns:
        FastAPI 앱 인스턴스
    """
    settings = get_settings()
    debug = debug or settings.debug

    app = FastAPI(
        title=title,
        version=version,
        description="""
# 설정 관리 API

실행 중인 프로세스의 라이브 설정을 조회하고 핫 리로드를 트리거합니다.

## 주요 기능

- **설정 스냅샷**: GET /api/v1/config
- **단일 설정 조회**: GET /api/v1/config/properties/{key}
- **플레이스홀더 해석**: POST /api/v1/config/resolve
- **설정 핫 리로드**: POST /api/v1/config/reload?force=false

## 인증

모든 /api/v1 요청에는 `X-API-Key` 헤더가 필요합니다.
        """,
        debug=debug,
        lifespan=lifespan,
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
    )

    # 라우터 등록
    app.include_router(health_router)  # /health
    app.include_router(config_router)  # /api/v1/config

    # 글로벌 예외 핸들러
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """글로벌 예외 핸들러"""
        logger.exception(f"[Server] 처리되지 않은 예외: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "Internal server error",
                "details": str(exc) if debug else None,
            },
        )

    return app
