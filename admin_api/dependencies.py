"""
FastAPI 의존성 주입 모듈

ReloadableStore, ReloadOrchestrator, Settings, Auth 등의 의존성을 관리합니다.
"""

from fastapi import Depends, Request

from propreload import (
    PlaceholderResolver,
    ReloadableStore,
    ReloaderSettings,
    ReloadOrchestrator,
)

from .middleware.auth import APIKeyAuth, get_api_key_auth


# ============================================================================
# API Key 인증 의존성
# ============================================================================
async def verify_api_key(
    request: Request,
    auth: APIKeyAuth = Depends(get_api_key_auth),
) -> str:
    """API Key 검증 의존성"""
    return await auth(request)


# ============================================================================
# 설정 저장소 / 오케스트레이터 의존성
# ============================================================================
_store: ReloadableStore | None = None
_orchestrator: ReloadOrchestrator | None = None


def set_store(store: ReloadableStore | None) -> None:
    """설정 저장소 지정 (앱 시작 시 호출)"""
    global _store
    _store = store


def get_store() -> ReloadableStore | None:
    """설정 저장소 의존성

    Returns:
        ReloadableStore 인스턴스 또는 None
    """
    return _store


def set_orchestrator(orchestrator: ReloadOrchestrator | None) -> None:
    """리로드 오케스트레이터 지정 (앱 시작 시 호출)

    저장소가 아직 지정되지 않았으면 오케스트레이터의 저장소를 함께 지정합니다.
    """
    global _orchestrator
    _orchestrator = orchestrator
    if orchestrator is not None and _store is None:
        set_store(orchestrator.store)


def get_orchestrator() -> ReloadOrchestrator | None:
    """리로드 오케스트레이터 의존성"""
    return _orchestrator


# ============================================================================
# 환경 설정 의존성
# ============================================================================
_settings: ReloaderSettings | None = None


def get_settings() -> ReloaderSettings:
    """앱 설정 의존성 (싱글톤)"""
    global _settings
    if _settings is None:
        _settings = ReloaderSettings.from_env()
    return _settings


def set_settings(settings: ReloaderSettings | None) -> None:
    """앱 설정 지정 (테스트/임베딩용)"""
    global _settings
    _settings = settings


def get_resolver(
    settings: ReloaderSettings = Depends(get_settings),
) -> PlaceholderResolver:
    """설정된 문법의 플레이스홀더 해석기"""
    return settings.build_resolver()
