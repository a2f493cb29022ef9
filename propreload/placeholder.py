"""
기본값 지원 플레이스홀더 해석기

`${name=default}` 형식의 토큰을 조회 함수로 해석하고,
값이 없으면 인라인 기본값으로 대체합니다.

사용법:
    ```python
    resolver = PlaceholderResolver()
    resolver.resolve("db.url=jdbc:mysql://localhost/db?a=b", store.lookup)
    resolver.substitute("jdbc:${dbname=mysql:mydb}", store.lookup)
    ```
"""

from typing import Callable

from .errors import UnresolvedPlaceholderError

Lookup = Callable[[str], "str | None"]

DEFAULT_PREFIX = "${"
DEFAULT_SUFFIX = "}"
DEFAULT_SEPARATOR = "="


class PlaceholderResolver:
    """플레이스홀더 해석기

    순수 함수로만 구성되며 상태를 바꾸지 않습니다.
    중첩/재귀 플레이스홀더는 지원하지 않습니다 (단일 레벨).
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        suffix: str = DEFAULT_SUFFIX,
        separator: str = DEFAULT_SEPARATOR,
    ):
        """
        Args:
            prefix: 플레이스홀더 시작 문자열
            suffix: 플레이스홀더 종료 문자열
            separator: 이름과 기본값 구분 문자열
        """
        if not prefix or not suffix or not separator:
            raise ValueError("prefix, suffix, separator는 빈 문자열일 수 없습니다")
        self.prefix = prefix
        self.suffix = suffix
        self.separator = separator

    def split(self, token: str) -> tuple[str, str | None]:
        """토큰을 (이름, 기본값) 쌍으로 분리

        첫 번째 구분자에서만 분리하므로 기본값 안에 구분자가 있어도 됩니다.

        Args:
            token: prefix/suffix 사이의 원문

        Returns:
            (name, default) - 구분자가 없으면 default는 None
        """
        idx = token.find(self.separator)
        if idx == -1:
            return token, None
        return token[:idx], token[idx + len(self.separator):]

    def resolve(self, token: str, lookup: Lookup) -> str | None:
        """토큰 해석

        조회 결과가 있으면 (빈 문자열 포함) 그대로 반환하고,
        없을 때만 기본값을 사용합니다.

        Args:
            token: prefix/suffix 사이의 원문
            lookup: 이름 → 값 또는 None

        Returns:
            해석된 값, 기본값, 또는 None (값/기본값 모두 없음)
        """
        name, default = self.split(token)
        value = lookup(name)
        if value is not None:
            return value
        return default

    def substitute(
        self,
        text: str,
        lookup: Lookup,
        ignore_unresolvable: bool = False,
    ) -> str:
        """문자열 안의 모든 플레이스홀더 치환

        Args:
            text: 템플릿 문자열 (예: "jdbc:${dbname=mysql:mydb}")
            lookup: 이름 → 값 또는 None
            ignore_unresolvable: True면 해석 불가 토큰을 원문 그대로 둠

        Returns:
            치환된 문자열

        Raises:
            UnresolvedPlaceholderError: 해석 불가 토큰이 있고 ignore_unresolvable=False
        """
        parts: list[str] = []
        pos = 0
        while True:
            start = text.find(self.prefix, pos)
            if start == -1:
                break
            end = text.find(self.suffix, start + len(self.prefix))
            if end == -1:
                break

            token = text[start + len(self.prefix):end]
            value = self.resolve(token, lookup)
            if value is None:
                if not ignore_unresolvable:
                    raise UnresolvedPlaceholderError(self.split(token)[0], text)
                value = text[start:end + len(self.suffix)]

            parts.append(text[pos:start])
            parts.append(value)
            pos = end + len(self.suffix)

        parts.append(text[pos:])
        return "".join(parts)

    def has_placeholder(self, text: str) -> bool:
        """플레이스홀더 포함 여부"""
        start = text.find(self.prefix)
        return start != -1 and text.find(self.suffix, start + len(self.prefix)) != -1
