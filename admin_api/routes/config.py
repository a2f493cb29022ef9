"""
설정 API 라우터

라이브 설정 조회, 플레이스홀더 해석, 핫 리로드를 제공합니다.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool

from propreload import (
    ListenerPostFailureError,
    ListenerPreFailureError,
    PlaceholderResolver,
    ReloadableStore,
    ReloadOrchestrator,
    SourceReadError,
    SourceUnavailableError,
    UnresolvedPlaceholderError,
)

from ..dependencies import get_orchestrator, get_resolver, get_store, verify_api_key
from ..schemas.request import ResolveRequest
from ..schemas.response import (
    ConfigSnapshotResponse,
    PropertyResponse,
    ReloadResponse,
    ResolveResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/config",
    tags=["Config"],
    dependencies=[Depends(verify_api_key)],
)


def _require_store(store: ReloadableStore | None) -> ReloadableStore:
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "CONFIG_UNAVAILABLE",
                "message": "Config store not initialized",
            },
        )
    return store


@router.get(
    "",
    response_model=ConfigSnapshotResponse,
    summary="설정 스냅샷 조회",
    description="현재 게시된 설정 전체와 리로드 상태를 조회합니다.",
)
async def get_snapshot(
    store: ReloadableStore | None = Depends(get_store),
    orchestrator: ReloadOrchestrator | None = Depends(get_orchestrator),
) -> ConfigSnapshotResponse:
    """설정 스냅샷 조회"""
    store = _require_store(store)
    version = store.version
    mapping = store.read()

    response = ConfigSnapshotResponse(version=version, properties=mapping.to_dict())
    if orchestrator is not None:
        response.state = orchestrator.state.value
        response.last_reloaded_at = orchestrator.last_reload_at
        response.sources = [str(source) for source in orchestrator.sources]
    return response


@router.get(
    "/properties/{key}",
    response_model=PropertyResponse,
    summary="단일 설정 조회",
)
async def get_property(
    key: str,
    store: ReloadableStore | None = Depends(get_store),
) -> PropertyResponse:
    """단일 설정 조회

    Raises:
        HTTPException: 키가 없으면 404
    """
    store = _require_store(store)
    value = store.get(key)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "NOT_FOUND",
                "message": f"Property '{key}' not found",
            },
        )
    return PropertyResponse(key=key, value=value, version=store.version)


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    summary="플레이스홀더 해석",
    description="템플릿 문자열의 플레이스홀더를 현재 설정과 기본값으로 해석합니다.",
)
async def resolve_template(
    request: ResolveRequest,
    store: ReloadableStore | None = Depends(get_store),
    resolver: PlaceholderResolver = Depends(get_resolver),
) -> ResolveResponse:
    """플레이스홀더 해석

    Raises:
        HTTPException: 해석 불가 토큰이 있으면 422
    """
    store = _require_store(store)
    version = store.version
    mapping = store.read()

    try:
        resolved = resolver.substitute(
            request.template,
            mapping.get,
            ignore_unresolvable=request.ignore_unresolvable,
        )
    except UnresolvedPlaceholderError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "UNRESOLVED_PLACEHOLDER",
                "message": str(e),
                "details": {"name": e.name},
            },
        )

    return ResolveResponse(template=request.template, resolved=resolved, version=version)


@router.post(
    "/reload",
    response_model=ReloadResponse,
    summary="설정 핫 리로드",
    description="소스 변경 여부를 확인하고 변경 시 (또는 force=true) 설정을 다시 로드합니다.",
)
async def reload_config(
    force: bool = Query(default=False, description="변경 감지 없이 강제 리로드"),
    orchestrator: ReloadOrchestrator | None = Depends(get_orchestrator),
) -> ReloadResponse:
    """설정 핫 리로드

    Returns:
        ReloadResponse: 리로드 여부와 리로드 후 게시 버전
    """
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "CONFIG_UNAVAILABLE",
                "message": "Reload orchestrator not initialized",
            },
        )

    try:
        changed = await run_in_threadpool(orchestrator.reload, force)
    except ListenerPreFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "LISTENER_REJECTED",
                "message": str(e),
                "details": {"listener": e.listener, "published": False},
            },
        )
    except (SourceUnavailableError, SourceReadError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": "SOURCE_FAILED",
                "message": str(e),
                "details": {"source": str(e.source), "published": False},
            },
        )
    except ListenerPostFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "LISTENER_POST_FAILED",
                "message": str(e),
                "details": {"listener": e.listener, "published": True},
            },
        )

    logger.info(f"[ConfigAPI] 리로드 요청 처리: changed={changed}, force={force}")
    return ReloadResponse(
        changed=changed,
        version=orchestrator.store.version,
        reloaded_at=orchestrator.last_reload_at,
    )
