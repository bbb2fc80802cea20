"""검색 요청 빌더.

index/id/body/파라미터를 체이닝으로 누적한 뒤 execute()로 전송하고
응답 엔벨로프를 반환합니다. destination이 지정되어 있으면 히트를 채웁니다.

Usage:
    >>> people = Destination(Person)
    >>> resp = (
    ...     client.search()
    ...     .index("persons")
    ...     .from_(0)
    ...     .size(10)
    ...     .query(DictQuery({"query": {"match_all": {}}}))
    ...     .object(people)
    ...     .execute()
    ... )
    >>> resp.took, people.items

한 인스턴스를 여러 스레드에서 동시에 사용하면 안 됩니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import quote

from esquery.errors import DecodeError, TemplateError, TransportError
from esquery.search.hydrate import hydrate
from esquery.search.query import QueryProtocol
from esquery.search.response import SearchResponse, decode_response
from esquery.templates import TemplateStore
from esquery.transport import CONTENT_TYPE_JSON, TransportProtocol

logger = logging.getLogger(__name__)

PARAM_FROM = "from"
PARAM_SIZE = "size"
PARAM_SCROLL = "scroll"

METHOD_GET = "GET"
METHOD_POST = "POST"


class BodyKind(str, Enum):
    NONE = "none"
    RAW = "raw"
    QUERY = "query"
    TEMPLATE = "template"


@dataclass(frozen=True)
class BodySource:
    """요청 본문 출처. 항상 하나의 variant만 활성."""

    kind: BodyKind = BodyKind.NONE
    data: bytes | None = None

    @property
    def is_empty(self) -> bool:
        return self.kind is BodyKind.NONE


@dataclass(frozen=True)
class SearchRequest:
    """execute() 직전의 최종 요청."""

    method: str
    url: str
    body: bytes | None


class SearchService:
    def __init__(
        self,
        transport: TransportProtocol,
        endpoint: str,
        template_store: TemplateStore,
    ):
        self._transport = transport
        self._endpoint = endpoint.rstrip("/")
        self._templates = template_store

        self._index = ""
        self._type = ""
        self._id = ""
        self._body = BodySource()
        self._destination: Any = None
        self._params: dict[str, Any] = {}

    @property
    def body_source(self) -> BodySource:
        return self._body

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._params)

    def index(self, index: str) -> SearchService:
        self._index = index
        return self

    def type(self, typ: str) -> SearchService:
        """문서 타입. URL에는 포함되지 않음 (ES 7+ 호환)."""
        self._type = typ
        return self

    def id(self, doc_id: str) -> SearchService:
        self._id = doc_id
        return self

    def body(self, body: bytes | str) -> SearchService:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = BodySource(BodyKind.RAW, body)
        return self

    def query(self, query: QueryProtocol) -> SearchService:
        """쿼리 객체를 즉시 직렬화해 본문으로 설정. 직렬화 예외는 그대로 전파."""
        self._body = BodySource(BodyKind.QUERY, query.to_bytes())
        return self

    def object(self, destination: Any) -> SearchService:
        self._destination = destination
        return self

    def from_(self, from_: int) -> SearchService:
        self._params[PARAM_FROM] = from_
        return self

    def size(self, size: int) -> SearchService:
        self._params[PARAM_SIZE] = size
        return self

    def scroll(self, scroll_time: str) -> SearchService:
        self._params[PARAM_SCROLL] = scroll_time
        return self

    def template(
        self,
        path: str | Path,
        name: str,
        data: Any = None,
        reload: bool = False,
    ) -> SearchService:
        """`path/name` 템플릿을 렌더링해 본문으로 설정.

        읽기/파싱/렌더링 실패는 로그만 남기고 기존 본문을 그대로 유지합니다.
        """
        try:
            rendered = self._templates.render(path, name, data, reload=reload)
        except TemplateError as e:
            logger.error(f"템플릿 적용 실패, 기존 본문 유지 ({self._body.kind.value}): {e}")
            return self

        self._body = BodySource(BodyKind.TEMPLATE, rendered)
        return self

    def _query_string(self) -> str:
        if not self._params:
            return ""
        pairs = [f"{name}={quote(str(value), safe='')}" for name, value in sorted(self._params.items())]
        return "?" + "&".join(pairs)

    def build(self) -> SearchRequest:
        """현재 상태로 method/URL/body 결정. 호출할 때마다 새로 계산."""
        method = METHOD_GET if self._body.is_empty else METHOD_POST
        path = f"/{self._id}" if self._id else "/_search"

        base = f"{self._endpoint}/{self._index}" if self._index else self._endpoint
        url = f"{base}{path}{self._query_string()}"

        return SearchRequest(method=method, url=url, body=self._body.data)

    def execute(self) -> SearchResponse:
        """요청 전송 → 응답 디코딩 → (정상 응답이면) 하이드레이션.

        엔진 에러나 not-found 응답은 예외 없이 그대로 반환합니다.

        Raises:
            TransportError: 전송 실패
            DecodeError: 응답 디코딩 실패
            HydrationError: destination 타입 불일치 (err.response로 엔벨로프 확인)
        """
        request = self.build()
        logger.debug(f"{request.method} {request.url}")

        try:
            raw = self._transport.send(request.method, request.url, request.body, CONTENT_TYPE_JSON)
        except TransportError:
            raise
        except Exception as e:
            logger.error(f"{request.method} {request.url} 전송 실패: {e}")
            raise TransportError("search.execute", f"{request.method} {request.url}", e) from e

        try:
            response = decode_response(raw.body)
        except DecodeError as e:
            raise DecodeError("search.execute", f"HTTP {raw.status}", e.cause) from e

        if response.is_error or response.is_not_found:
            return response

        if self._destination is not None:
            hydrate(response, self._destination)

        return response
