"""
리로더 설정

환경변수 기반 설정 관리.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigurationError
from .placeholder import (
    DEFAULT_PREFIX,
    DEFAULT_SEPARATOR,
    DEFAULT_SUFFIX,
    PlaceholderResolver,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ReloaderSettings:
    """리로더 설정"""

    # 설정 소스 (앞 → 뒤 순서로 우선순위 증가)
    sources: list[str] = field(default_factory=lambda: ["config/application.properties"])
    ignore_missing: bool = False
    encoding: str | None = None

    # 리로드 트리거
    reload_interval: float = 10.0  # 주기적 확인 (초), 0이면 비활성
    watch_files: bool = True  # watchdog 파일 감시
    debounce_seconds: float = 2.0

    # 플레이스홀더 문법
    placeholder_prefix: str = DEFAULT_PREFIX
    placeholder_suffix: str = DEFAULT_SUFFIX
    placeholder_separator: str = DEFAULT_SEPARATOR

    # 관리 API
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def debug(self) -> bool:
        return self.env == "dev"

    @classmethod
    def from_env(cls) -> "ReloaderSettings":
        """환경변수에서 설정 로드"""
        # 형식: "config/defaults.properties,config/local.properties"
        sources_str = os.getenv("PROPRELOAD_SOURCES", "")
        sources = [s.strip() for s in sources_str.split(",") if s.strip()]

        return cls(
            sources=(
                sources
                if sources
                else cls.__dataclass_fields__["sources"].default_factory()
            ),
            ignore_missing=_env_bool("PROPRELOAD_IGNORE_MISSING", False),
            encoding=os.getenv("PROPRELOAD_ENCODING") or None,
            reload_interval=float(os.getenv("PROPRELOAD_RELOAD_INTERVAL", "10")),
            watch_files=_env_bool("PROPRELOAD_WATCH_FILES", True),
            debounce_seconds=float(os.getenv("PROPRELOAD_DEBOUNCE_SECONDS", "2")),
            placeholder_prefix=os.getenv("PROPRELOAD_PLACEHOLDER_PREFIX", DEFAULT_PREFIX),
            placeholder_suffix=os.getenv("PROPRELOAD_PLACEHOLDER_SUFFIX", DEFAULT_SUFFIX),
            placeholder_separator=os.getenv(
                "PROPRELOAD_PLACEHOLDER_SEPARATOR", DEFAULT_SEPARATOR
            ),
            env=os.getenv("ENV", "dev"),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
        )

    def validate(self, strict: bool = True) -> list[str]:
        """설정값 검증

        Args:
            strict: True면 오류 시 예외 발생, False면 로그만

        Returns:
            list[str]: 검증 오류/경고 메시지 목록

        Raises:
            ConfigurationError: strict=True이고 오류가 있을 때
        """
        errors = []
        warnings = []

        if not self.sources:
            errors.append("설정 소스가 없음: PROPRELOAD_SOURCES")

        for source in self.sources:
            if not Path(source).exists():
                message = f"설정 파일 없음: {source}"
                if self.ignore_missing:
                    warnings.append(message)
                else:
                    errors.append(message)

        if self.reload_interval < 0:
            errors.append(f"잘못된 리로드 주기: {self.reload_interval}")
        elif 0 < self.reload_interval < 1:
            warnings.append(f"리로드 주기가 너무 짧음: {self.reload_interval}초")

        if self.debounce_seconds < 0:
            errors.append(f"잘못된 디바운스 시간: {self.debounce_seconds}")

        for name in ("placeholder_prefix", "placeholder_suffix", "placeholder_separator"):
            if not getattr(self, name):
                errors.append(f"빈 플레이스홀더 설정: {name}")

        if not 0 < self.api_port < 65536:
            errors.append(f"잘못된 API 포트: {self.api_port}")

        # 경고 로깅
        for warning in warnings:
            logger.warning(f"[Config] {warning}")

        # 오류 처리
        if errors:
            for error in errors:
                logger.error(f"[Config] {error}")
            if strict:
                raise ConfigurationError(
                    f"설정 검증 실패: {len(errors)}개 오류\n" + "\n".join(errors)
                )

        return errors + warnings

    @classmethod
    def from_env_validated(cls, strict: bool = True) -> "ReloaderSettings":
        """환경변수에서 설정 로드 및 검증"""
        settings = cls.from_env()
        settings.validate(strict=strict)
        return settings

    def build_resolver(self) -> PlaceholderResolver:
        """설정된 문법의 플레이스홀더 해석기"""
        return PlaceholderResolver(
            prefix=self.placeholder_prefix,
            suffix=self.placeholder_suffix,
            separator=self.placeholder_separator,
        )
