"""
API 요청 스키마 정의
"""

from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    """플레이스홀더 해석 요청

    POST /api/v1/config/resolve 본문입니다.
    """

    template: str = Field(
        ...,
        description="플레이스홀더가 포함된 템플릿 문자열",
        examples=["jdbc:${dbname=mysql:mydb}"],
    )
    ignore_unresolvable: bool = Field(
        default=False,
        description="해석 불가 토큰을 원문 그대로 둘지 여부",
    )
