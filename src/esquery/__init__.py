"""Elasticsearch 검색 요청 빌더 + 응답 하이드레이션.

주요 컴포넌트:
    - Elastic: 설정/전송/템플릿 저장소를 묶은 클라이언트
    - SearchService: 체이닝 방식 검색 요청 빌더
    - TemplateStore: 프로세스 전역 write-once 템플릿 캐시 (Jinja2)
    - SearchResponse: 응답 엔벨로프 (hits / not-found / error)
    - Destination: 히트를 도메인 타입 목록으로 채우는 컨테이너
    - DocumentRepository: 인덱스 단위 타입 지정 조회/대량 색인

Usage:
    >>> from esquery import Destination, ESConfig, Elastic
    >>>
    >>> client = Elastic(ESConfig())
    >>> people = Destination(Person)
    >>> resp = client.search().index("persons").size(10).body(b'{"query": {"match_all": {}}}').object(people).execute()
"""

from esquery.client import Elastic, check_connection, create_es_client
from esquery.config import ESConfig
from esquery.errors import (
    BulkError,
    DecodeError,
    ESQueryError,
    HydrationError,
    TemplateError,
    TransportError,
)
from esquery.repository import DocumentRepository
from esquery.search import (
    Destination,
    DictQuery,
    Hit,
    ResponseKind,
    SearchResponse,
    SearchService,
)
from esquery.templates import FileTemplateReader, SearchTemplate, TemplateStore, shared_template_store
from esquery.transport import ElasticsearchTransport, TransportResponse

__all__ = [
    # Config
    "ESConfig",
    # Client
    "Elastic",
    "create_es_client",
    "check_connection",
    "ElasticsearchTransport",
    "TransportResponse",
    # Search
    "SearchService",
    "DictQuery",
    "SearchResponse",
    "ResponseKind",
    "Hit",
    "Destination",
    # Templates
    "TemplateStore",
    "FileTemplateReader",
    "SearchTemplate",
    "shared_template_store",
    # Repository
    "DocumentRepository",
    # Errors
    "ESQueryError",
    "TransportError",
    "DecodeError",
    "TemplateError",
    "HydrationError",
    "BulkError",
]
