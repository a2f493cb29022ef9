"""
헬스체크 API 라우터

서버 상태, 게시된 설정 버전, 리로드 상태를 반환합니다.
"""

import time

from fastapi import APIRouter, Depends

from propreload import ReloadableStore, ReloadOrchestrator

from ..dependencies import get_orchestrator, get_store
from ..schemas.response import HealthResponse

router = APIRouter(tags=["Health"])

# 서버 시작 시각
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="헬스체크",
    description="서버 상태 및 설정 저장소 상태를 반환합니다.",
)
async def health_check(
    store: ReloadableStore | None = Depends(get_store),
    orchestrator: ReloadOrchestrator | None = Depends(get_orchestrator),
) -> HealthResponse:
    """서버 헬스체크"""
    uptime = int(time.time() - _start_time)

    if store is None:
        return HealthResponse(status="degraded", uptime_seconds=uptime)

    return HealthResponse(
        status="ok",
        config_version=store.version,
        property_count=len(store.read()),
        reload_state=orchestrator.state.value if orchestrator else "unknown",
        uptime_seconds=uptime,
    )


@router.get(
    "/health/live",
    summary="Liveness 체크",
    description="서버가 살아있는지 확인합니다. (Kubernetes liveness probe용)",
)
async def liveness() -> dict[str, str]:
    """Liveness 체크 (경량)"""
    return {"status": "ok"}


@router.get(
    "/health/ready",
    summary="Readiness 체크",
    description="첫 설정 게시가 끝났는지 확인합니다. (Kubernetes readiness probe용)",
)
async def readiness(
    store: ReloadableStore | None = Depends(get_store),
) -> dict[str, str]:
    """Readiness 체크

    설정이 한 번 이상 게시되었으면 ready 반환
    """
    if store is None or store.version == 0:
        return {"status": "not_ready"}
    return {"status": "ready"}
