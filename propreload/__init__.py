"""
propreload - 핫 리로드 가능한 기본값 지원 설정 라이브러리

설정 저장소, 변경 감지, 리로드 오케스트레이션, 플레이스홀더 해석 제공.
"""

from .binding import LiveSetting
from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorClassifier,
    ListenerPostFailureError,
    ListenerPreFailureError,
    ReloadableConfigError,
    SourceReadError,
    SourceUnavailableError,
    UnresolvedPlaceholderError,
)
from .loaders import (
    PropertiesLoader,
    SourceLoader,
    XmlPropertiesLoader,
    YamlPropertiesLoader,
    parse_properties,
    select_loader,
)
from .orchestrator import ReloadOrchestrator
from .placeholder import PlaceholderResolver
from .settings import ReloaderSettings
from .source_watcher import SourceWatcher, file_marker
from .store import ListenerRegistration, ReconfigurationAware, ReloadableStore
from .triggers import FileChangeTrigger, PeriodicReloadTrigger
from .types import (
    ConfigurationMapping,
    ReloadState,
    SourceDescriptor,
    build_sources,
)

__all__ = [
    # Store
    "ListenerRegistration",
    "ReconfigurationAware",
    "ReloadableStore",
    # Orchestration
    "ReloadOrchestrator",
    "SourceWatcher",
    "file_marker",
    # Triggers
    "FileChangeTrigger",
    "PeriodicReloadTrigger",
    # Loaders
    "PropertiesLoader",
    "SourceLoader",
    "XmlPropertiesLoader",
    "YamlPropertiesLoader",
    "parse_properties",
    "select_loader",
    # Placeholder
    "LiveSetting",
    "PlaceholderResolver",
    # Errors
    "ConfigurationError",
    "ErrorCategory",
    "ErrorClassifier",
    "ListenerPostFailureError",
    "ListenerPreFailureError",
    "ReloadableConfigError",
    "SourceReadError",
    "SourceUnavailableError",
    "UnresolvedPlaceholderError",
    # Types
    "ConfigurationMapping",
    "ReloadState",
    "SourceDescriptor",
    "build_sources",
    # Settings
    "ReloaderSettings",
]
