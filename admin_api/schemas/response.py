"""
API 응답 스키마 정의

라이브 설정 스냅샷, 리로드 결과, 헬스 상태를 반환하는 Pydantic 모델입니다.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ConfigSnapshotResponse(BaseModel):
    """설정 스냅샷 응답

    GET /api/v1/config 응답으로 반환됩니다.
    """

    version: int = Field(..., description="게시 버전 (교체 성공 횟수)")
    state: str = Field(default="idle", description="리로드 사이클 상태")
    last_reloaded_at: datetime | None = Field(
        default=None, description="마지막 리로드 성공 시각"
    )
    sources: list[str] = Field(
        default_factory=list, description="우선순위 순서의 소스 경로"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="현재 게시된 설정 (key -> value)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "version": 3,
                "state": "idle",
                "last_reloaded_at": "2026-01-01T00:00:00Z",
                "sources": ["config/defaults.properties", "config/local.properties"],
                "properties": {"foo": "fooval", "bar": "barval"},
            }
        }
    }


class PropertyResponse(BaseModel):
    """단일 키 조회 응답"""

    key: str = Field(..., description="설정 키")
    value: str = Field(..., description="설정 값")
    version: int = Field(..., description="게시 버전")


class ReloadResponse(BaseModel):
    """리로드 결과 응답

    POST /api/v1/config/reload 응답으로 반환됩니다.
    """

    changed: bool = Field(..., description="실제로 리로드가 일어났는지 여부")
    version: int = Field(..., description="리로드 후 게시 버전")
    reloaded_at: datetime | None = Field(
        default=None, description="마지막 리로드 성공 시각"
    )


class ResolveResponse(BaseModel):
    """플레이스홀더 해석 응답"""

    template: str = Field(..., description="요청 템플릿")
    resolved: str = Field(..., description="해석 결과")
    version: int = Field(..., description="해석에 사용한 게시 버전")


class ErrorResponse(BaseModel):
    """에러 응답"""

    error: str = Field(..., description="에러 코드")
    message: str = Field(..., description="에러 메시지")
    details: dict[str, Any] | None = Field(default=None, description="상세 정보")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "LISTENER_REJECTED",
                "message": "리스너 사전 처리 실패: pool - busy",
                "details": {"published": False},
            }
        }
    }


class HealthResponse(BaseModel):
    """헬스체크 응답

    GET /health 응답으로 반환됩니다.
    """

    status: str = Field(default="ok", description="서버 상태")
    config_version: int = Field(default=0, description="게시 버전")
    property_count: int = Field(default=0, description="게시된 키 수")
    reload_state: str = Field(default="unknown", description="리로드 사이클 상태")
    uptime_seconds: int = Field(default=0, description="서버 가동 시간 (초)")
