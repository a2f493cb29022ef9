"""
설정 관리 API 모듈

FastAPI 기반 HTTP API로 라이브 설정 조회와 핫 리로드를 제공합니다.
"""

from .server import create_app

__all__ = ["create_app"]
