"""검색 쿼리 객체.

SearchService.query()는 `to_bytes()`를 제공하는 객체면 무엇이든 받습니다.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol


class QueryProtocol(Protocol):
    """요청 본문으로 직렬화 가능한 쿼리 인터페이스."""

    def to_bytes(self) -> bytes: ...


class DictQuery:
    """dict 형태의 ES DSL을 그대로 본문으로 사용하는 쿼리."""

    def __init__(self, body: Mapping[str, Any]):
        self.body = body

    def to_bytes(self) -> bytes:
        return json.dumps(self.body, ensure_ascii=False).encode("utf-8")
