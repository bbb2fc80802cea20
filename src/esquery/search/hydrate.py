"""Hit 하이드레이션.

응답의 `_source` 목록을 하나의 JSON 배열로 다시 직렬화한 뒤
destination 요소 타입으로 한 번에 디코딩합니다.
전부 성공하거나 전부 실패하며, 실패 시 destination은 변경되지 않습니다.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from esquery.errors import HydrationError
from esquery.search.response import SearchResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class HydratableProtocol(Protocol):
    """JSON 배열 바이트를 받아 자신을 채우는 destination 인터페이스."""

    def hydrate(self, raw: bytes) -> None: ...


class Destination(Generic[T]):
    """요소 타입이 지정된 결과 컨테이너.

    Example:
        >>> people = Destination(Person)
        >>> client.search().index("persons").object(people).execute()
        >>> people.items  # list[Person], 히트 순서 유지
    """

    def __init__(self, item_type: Any = Any):
        self.item_type = item_type
        self.items: list[T] = []
        self._adapter: TypeAdapter[list[T]] = TypeAdapter(list[item_type])

    def hydrate(self, raw: bytes) -> None:
        # 검증이 끝난 뒤에만 교체
        self.items = self._adapter.validate_json(raw)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, i: int) -> T:
        return self.items[i]

    def __repr__(self) -> str:
        return f"Destination({self.item_type!r}, items={len(self.items)})"


def sources_to_json(response: SearchResponse) -> bytes:
    """히트 `_source` 목록을 JSON 배열 바이트로 직렬화."""
    return json.dumps(response.hit_sources(), ensure_ascii=False).encode("utf-8")


def hydrate(response: SearchResponse, destination: Any) -> None:
    """응답 히트를 destination에 채움.

    지원 destination:
        - HydratableProtocol 구현체 (Destination 포함)
        - list: JSON 값 그대로 내용 교체

    Raises:
        HydrationError: 타입 불일치 또는 지원하지 않는 destination.
            `err.response`로 엔벨로프를 그대로 확인 가능.
    """
    raw = sources_to_json(response)

    try:
        if isinstance(destination, HydratableProtocol):
            destination.hydrate(raw)
        elif isinstance(destination, list):
            destination[:] = json.loads(raw)
        else:
            raise TypeError(f"unsupported destination type: {type(destination).__name__}")
    except (ValidationError, ValueError, TypeError) as e:
        logger.error(f"하이드레이션 실패 ({len(response.hits.hits)} hits): {e}")
        raise HydrationError("search.hydrate", "cannot decode hits into destination", e, response) from e
