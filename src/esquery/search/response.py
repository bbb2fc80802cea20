"""검색 응답 엔벨로프 디코더.

Elasticsearch REST 응답 하나를 SearchResponse로 파싱합니다.
hit 목록, 단건 not-found, 엔진 에러 세 가지 형태를 모두 같은 모델로 받고
없는 필드는 기본값으로 둡니다. 잘못된 JSON일 때만 실패합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from esquery.errors import DecodeError

logger = logging.getLogger(__name__)


class ResponseKind(str, Enum):
    """응답 형태."""

    HITS = "hits"
    DOCUMENT = "document"  # 단건 조회 성공 (found: true)
    NOT_FOUND = "not_found"
    ERROR = "error"


class ShardsInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0


class Hit(BaseModel):
    """검색 결과 히트 (메타데이터 + 원본 _source)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index: str | None = Field(default=None, alias="_index")
    type: str | None = Field(default=None, alias="_type")
    id: str | None = Field(default=None, alias="_id")
    score: float | None = Field(default=None, alias="_score")
    source: Any = Field(default=None, alias="_source")


class HitsInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    max_score: float | None = None
    hits: list[Hit] = Field(default_factory=list)

    @field_validator("total", mode="before")
    @classmethod
    def _total_value(cls, v: Any) -> Any:
        # ES 7+ 는 {"value": n, "relation": "eq"} 형태
        if isinstance(v, Mapping):
            return v.get("value", 0)
        if v is None:
            return 0
        return v


class SearchResponse(BaseModel):
    """검색 응답 엔벨로프.

    Attributes:
        took: 처리 시간 (ms)
        timed_out: 타임아웃 여부
        shards: 샤드 처리 요약
        hits: 히트 목록
        scroll_id: scroll 요청 시 다음 페이지 조회용 id
        index, type, id, found, source: 단건 조회 응답 필드
        error, status: 엔진 에러 응답 필드
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    took: int = 0
    timed_out: bool = False
    shards: ShardsInfo = Field(default_factory=ShardsInfo, alias="_shards")
    hits: HitsInfo = Field(default_factory=HitsInfo)
    scroll_id: str | None = Field(default=None, alias="_scroll_id")

    # 단건 조회 (found: false 이면 not-found)
    index: str | None = Field(default=None, alias="_index")
    type: str | None = Field(default=None, alias="_type")
    id: str | None = Field(default=None, alias="_id")
    found: bool | None = None
    source: Any = Field(default=None, alias="_source")

    # 엔진 에러
    error: Any = None
    status: int | None = None

    @property
    def kind(self) -> ResponseKind:
        if self.error is not None:
            return ResponseKind.ERROR
        if self.found is False:
            return ResponseKind.NOT_FOUND
        if self.found is True:
            return ResponseKind.DOCUMENT
        return ResponseKind.HITS

    @property
    def is_error(self) -> bool:
        return self.kind is ResponseKind.ERROR

    @property
    def is_not_found(self) -> bool:
        return self.kind is ResponseKind.NOT_FOUND

    @property
    def error_reason(self) -> str | None:
        """에러 사유 문자열 (에러 응답이 아니면 None)."""
        if self.error is None:
            return None
        if isinstance(self.error, Mapping):
            reason = self.error.get("reason") or self.error.get("type")
            return str(reason) if reason is not None else str(dict(self.error))
        return str(self.error)

    def hit_sources(self) -> list[Any]:
        """히트 순서대로 _source 목록 반환.

        단건 조회 성공 응답이면 그 문서 하나만 담아 반환.
        """
        if self.kind is ResponseKind.DOCUMENT and not self.hits.hits:
            return [self.source]
        return [h.source for h in self.hits.hits]


def decode_response(raw: bytes | str) -> SearchResponse:
    """원본 응답을 SearchResponse로 디코딩.

    Raises:
        DecodeError: JSON이 아니거나 필드 타입이 엔벨로프와 맞지 않는 경우
    """
    try:
        return SearchResponse.model_validate_json(raw)
    except ValidationError as e:
        logger.error(f"검색 응답 디코딩 실패: {e}")
        raise DecodeError("search.decode", "invalid search response", e) from e
