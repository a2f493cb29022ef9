"""
에러 분류 시스템

리로드 사이클에서 발생하는 실패를 타입별로 구분하고,
재시도 가능 여부를 판단하여 트리거 로깅/재시도 정책에 활용.
"""

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """에러 카테고리"""

    RETRYABLE = "retryable"  # 일시적 I/O 장애, 다음 주기에 재시도 가능
    NON_RETRYABLE = "non_retryable"  # 소스 없음, 리스너 거부 등
    UNKNOWN = "unknown"


# 재시도 가능 에러 패턴
RETRYABLE_PATTERNS = [
    "timeout",
    "temporarily",
    "unavailable",
    "resource busy",
    "interrupted",
    "EAGAIN",
    "EBUSY",
]

# 재시도 불가 에러 패턴
NON_RETRYABLE_PATTERNS = [
    "not found",
    "no such file",
    "permission",
    "is a directory",
    "invalid",
    "malformed",
]


class ReloadableConfigError(Exception):
    """설정 리로드 기본 에러"""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, category: ErrorCategory | None = None):
        super().__init__(message)
        if category is not None:
            self.category = category


class ConfigurationError(ReloadableConfigError):
    """데몬/환경변수 설정 오류"""

    category = ErrorCategory.NON_RETRYABLE


class SourceUnavailableError(ReloadableConfigError):
    """소스 리소스 없음

    소스별 ignore_not_found 플래그가 꺼져 있으면 리로드 전체를 중단합니다.
    """

    category = ErrorCategory.NON_RETRYABLE

    def __init__(self, source: Any):
        super().__init__(f"설정 소스 없음: {source}")
        self.source = source


class SourceReadError(ReloadableConfigError):
    """소스 읽기 중 I/O 또는 파싱 실패 (항상 리로드 중단)"""

    category = ErrorCategory.RETRYABLE

    def __init__(self, source: Any, cause: BaseException):
        super().__init__(f"설정 소스 읽기 실패: {source} - {cause}")
        self.source = source
        self.cause = cause


class ListenerPreFailureError(ReloadableConfigError):
    """pre-replace 콜백 실패 (게시 전 중단, 저장소 변경 없음)"""

    category = ErrorCategory.NON_RETRYABLE

    def __init__(self, listener: str, cause: BaseException):
        super().__init__(f"리스너 사전 처리 실패: {listener} - {cause}")
        self.listener = listener
        self.cause = cause


class ListenerPostFailureError(ReloadableConfigError):
    """post-replace 콜백 실패

    새 매핑은 이미 게시된 상태입니다. 실패한 리스너 이후의 리스너는
    완료 알림을 받지 못합니다.
    """

    def __init__(self, listener: str, cause: BaseException):
        super().__init__(f"리스너 사후 처리 실패 (게시 완료됨): {listener} - {cause}")
        self.listener = listener
        self.cause = cause


class UnresolvedPlaceholderError(ReloadableConfigError):
    """값도 기본값도 없는 플레이스홀더"""

    category = ErrorCategory.NON_RETRYABLE

    def __init__(self, name: str, text: str | None = None):
        message = f"플레이스홀더 해석 실패: '{name}'"
        if text is not None:
            message += f" (원문: {text!r})"
        super().__init__(message)
        self.name = name
        self.text = text


class ErrorClassifier:
    """에러 분류기"""

    @classmethod
    def classify(cls, error: BaseException) -> ErrorCategory:
        """에러를 분류하여 카테고리 반환

        Args:
            error: 분류할 예외 객체

        Returns:
            ErrorCategory: 재시도 가능 여부에 따른 카테고리
        """
        if isinstance(error, ReloadableConfigError):
            return error.category

        error_str = str(error).lower()

        # 패턴 매칭 (우선순위: NON_RETRYABLE > RETRYABLE)
        for pattern in NON_RETRYABLE_PATTERNS:
            if pattern.lower() in error_str:
                return ErrorCategory.NON_RETRYABLE

        for pattern in RETRYABLE_PATTERNS:
            if pattern.lower() in error_str:
                return ErrorCategory.RETRYABLE

        # 예외 타입 기반 분류
        if isinstance(error, (FileNotFoundError, PermissionError, ValueError, KeyError)):
            return ErrorCategory.NON_RETRYABLE

        if isinstance(error, (TimeoutError, OSError)):
            return ErrorCategory.RETRYABLE

        return ErrorCategory.UNKNOWN

    @classmethod
    def format_message(cls, error: BaseException) -> str:
        """에러 메시지 포맷팅

        Args:
            error: 포맷팅할 예외 객체

        Returns:
            str: 카테고리 라벨이 포함된 에러 메시지
        """
        category = cls.classify(error)
        label = {
            ErrorCategory.RETRYABLE: "[재시도 가능]",
            ErrorCategory.NON_RETRYABLE: "[재시도 불가]",
            ErrorCategory.UNKNOWN: "[분류되지 않음]",
        }
        return f"{label[category]} {type(error).__name__}: {error}"
