"""Base repository with typed search, get and bulk create."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from esquery.client import Elastic
from esquery.search import Destination, QueryProtocol, SearchResponse

T = TypeVar("T")


class DocumentRepository(Generic[T]):
    """단일 인덱스의 문서를 도메인 타입 T로 다루는 리포지토리.

    T는 pydantic 모델, dataclass, TypedDict 등 pydantic이 검증 가능한 타입.

    Example:
        >>> repo = DocumentRepository(client, "persons", Person, id_of=lambda p: str(p.age))
        >>> repo.bulk_create(people)
        >>> repo.search(DictQuery({"query": {"match": {"name": "kim"}}}), size=10)
    """

    def __init__(
        self,
        client: Elastic,
        index_name: str,
        model: type[T],
        id_of: Callable[[T], str] | None = None,
    ):
        self.client = client
        self.index_name = index_name
        self.model = model
        self._id_of = id_of
        self._adapter: TypeAdapter[T] = TypeAdapter(model)

    def _to_es_dict(self, doc: T) -> dict[str, Any]:
        return self._adapter.dump_python(doc, mode="json", exclude_none=True)

    def get(self, doc_id: str) -> T | None:
        """ID로 단일 문서 조회. 없거나 엔진 에러면 None."""
        out: Destination[T] = Destination(self.model)
        resp = self.client.search().index(self.index_name).id(doc_id).object(out).execute()
        if resp.is_error or resp.is_not_found or not out.items:
            return None
        return out.items[0]

    def search(
        self,
        query: QueryProtocol,
        from_: int | None = None,
        size: int | None = None,
    ) -> tuple[list[T], SearchResponse]:
        """쿼리 검색. (문서 목록, 응답 엔벨로프) 반환."""
        out: Destination[T] = Destination(self.model)
        service = self.client.search().index(self.index_name).query(query).object(out)
        if from_ is not None:
            service.from_(from_)
        if size is not None:
            service.size(size)
        resp = service.execute()
        return out.items, resp

    def bulk_create(self, docs: Iterable[T], refresh: bool = False) -> int:
        """문서 대량 create. 성공 건수 반환.

        Raises:
            ValueError: id_of가 지정되지 않은 경우.
        """
        if self._id_of is None:
            raise ValueError("bulk_create에는 id_of가 필요합니다.")
        id_of = self._id_of
        pairs = ((id_of(d), self._to_es_dict(d)) for d in docs)
        return self.client.bulk_create(self.index_name, pairs, refresh=refresh)
