"""
설정 소스 로더

파일 확장자 규칙에 따라 로더 전략을 선택합니다.

지원 형식:
- key=value 텍스트 (.properties 및 기타 확장자)
- XML 프로퍼티 목록 (.xml)
- YAML (.yaml, .yml) - 중첩 키는 점(.)으로 평탄화

파일이 없으면 FileNotFoundError를 그대로 전파합니다.
ignore_not_found 처리는 ReloadOrchestrator의 몫입니다.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Protocol

import yaml

DEFAULT_PROPERTIES_ENCODING = "iso-8859-1"
XML_FILE_EXTENSION = ".xml"
YAML_FILE_EXTENSIONS = (".yaml", ".yml")

_WHITESPACE = " \t\f"
_KEY_TERMINATORS = "=:" + _WHITESPACE
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|u|.)", re.DOTALL)
_ESCAPE_CHARS = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class SourceLoader(Protocol):
    """소스 로더 인터페이스"""

    def load(self, path: Path, encoding: str | None = None) -> dict[str, str]:
        """파일을 읽어 key → value 딕셔너리 반환"""
        ...


# ============================================================================
# key=value 텍스트
# ============================================================================


def _ends_with_continuation(line: str) -> bool:
    """홀수 개의 역슬래시로 끝나면 다음 줄과 이어짐"""
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _logical_lines(text: str):
    buffer: str | None = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if buffer is None and (not line or line[0] in "#!"):
            continue

        if _ends_with_continuation(line):
            buffer = (buffer or "") + line[:-1]
            continue

        yield (buffer or "") + line
        buffer = None

    if buffer is not None:
        yield buffer


def _unescape(text: str) -> str:
    def replace(match: re.Match) -> str:
        escaped = match.group(1)
        if escaped == "u":
            raise ValueError(f"잘못된 \\uxxxx 인코딩: {text!r}")
        if escaped.startswith("u"):
            return chr(int(escaped[1:], 16))
        return _ESCAPE_CHARS.get(escaped, escaped)

    return _ESCAPE.sub(replace, text)


def _split_entry(line: str) -> tuple[str, str]:
    end = 0
    length = len(line)
    while end < length:
        char = line[end]
        if char == "\\":
            end += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        end += 1
    end = min(end, length)

    value_start = end
    while value_start < length and line[value_start] in _WHITESPACE:
        value_start += 1
    if value_start < length and line[value_start] in "=:":
        value_start += 1
        while value_start < length and line[value_start] in _WHITESPACE:
            value_start += 1

    return _unescape(line[:end]), _unescape(line[value_start:])


def parse_properties(text: str) -> dict[str, str]:
    """key=value 텍스트 파싱

    - `#`, `!`로 시작하는 줄은 주석
    - 구분자: `=`, `:`, 또는 공백
    - 줄 끝 역슬래시는 다음 줄과 연결 (다음 줄 앞 공백 제거)
    - 이스케이프: \\t \\n \\r \\f \\uXXXX, 그 외 \\c → c
    - 같은 키가 여러 번 나오면 마지막 값 사용

    Args:
        text: 파일 내용

    Returns:
        key → value 딕셔너리

    Raises:
        ValueError: 잘못된 \\uxxxx 이스케이프
    """
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        properties[key] = value
    return properties


class PropertiesLoader:
    """key=value 텍스트 로더"""

    def __init__(self, default_encoding: str = DEFAULT_PROPERTIES_ENCODING):
        self.default_encoding = default_encoding

    def load(self, path: Path, encoding: str | None = None) -> dict[str, str]:
        with open(path, encoding=encoding or self.default_encoding) as f:
            return parse_properties(f.read())


# ============================================================================
# XML 프로퍼티 목록
# ============================================================================


class XmlPropertiesLoader:
    """XML 프로퍼티 목록 로더

    형식:
        <properties>
          <comment>선택</comment>
          <entry key="foo">fooval</entry>
        </properties>

    인코딩은 XML 선언을 따르므로 encoding 인자는 사용하지 않습니다.
    """

    def load(self, path: Path, encoding: str | None = None) -> dict[str, str]:
        with open(path, "rb") as f:
            root = ET.parse(f).getroot()

        if root.tag != "properties":
            raise ValueError(f"잘못된 루트 요소: <{root.tag}> (<properties> 필요)")

        properties: dict[str, str] = {}
        for entry in root.iter("entry"):
            key = entry.get("key")
            if key is None:
                raise ValueError("key 속성이 없는 <entry> 요소")
            properties[key] = entry.text or ""
        return properties


# ============================================================================
# YAML
# ============================================================================


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def flatten(data: dict[str, Any], parent: str = "") -> dict[str, str]:
    """중첩 딕셔너리를 점(.) 구분 키로 평탄화

    Examples:
        >>> flatten({"db": {"pool": {"size": 10}}})
        {'db.pool.size': '10'}
    """
    result: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            result.update(flatten(value, full_key))
        else:
            result[full_key] = _stringify(value)
    return result


class YamlPropertiesLoader:
    """YAML 로더 (중첩 키 평탄화)"""

    def load(self, path: Path, encoding: str | None = None) -> dict[str, str]:
        with open(path, encoding=encoding or "utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(
                f"YAML 루트는 dict여야 합니다, 수신: {type(data).__name__}"
            )
        return flatten(data)


def select_loader(path: str | Path) -> SourceLoader:
    """파일 확장자로 로더 선택

    Args:
        path: 설정 파일 경로

    Returns:
        .xml → XmlPropertiesLoader, .yaml/.yml → YamlPropertiesLoader,
        그 외 → PropertiesLoader
    """
    suffix = Path(path).suffix.lower()
    if suffix == XML_FILE_EXTENSION:
        return XmlPropertiesLoader()
    if suffix in YAML_FILE_EXTENSIONS:
        return YamlPropertiesLoader()
    return PropertiesLoader()
