"""
API 요청/응답 스키마 모듈
"""

from .request import ResolveRequest
from .response import (
    ConfigSnapshotResponse,
    ErrorResponse,
    HealthResponse,
    PropertyResponse,
    ReloadResponse,
    ResolveResponse,
)

__all__ = [
    # Request
    "ResolveRequest",
    # Response
    "ConfigSnapshotResponse",
    "ErrorResponse",
    "HealthResponse",
    "PropertyResponse",
    "ReloadResponse",
    "ResolveResponse",
]
