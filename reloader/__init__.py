"""
설정 리로드 데몬

설정 소스를 감시하며 라이브 설정을 갱신하는 실행 모듈과 예제 소비자.
"""

from .consumer import CacheService
from .main import Reloader, run

__all__ = ["CacheService", "Reloader", "run"]
