"""Search layer: 요청 빌더, 응답 엔벨로프, 하이드레이션."""

from .hydrate import Destination, HydratableProtocol, hydrate
from .query import DictQuery, QueryProtocol
from .response import Hit, HitsInfo, ResponseKind, SearchResponse, ShardsInfo, decode_response
from .service import BodyKind, BodySource, SearchRequest, SearchService

__all__ = [
    # 빌더
    "SearchService",
    "SearchRequest",
    "BodyKind",
    "BodySource",
    # 쿼리
    "QueryProtocol",
    "DictQuery",
    # 응답
    "SearchResponse",
    "ResponseKind",
    "Hit",
    "HitsInfo",
    "ShardsInfo",
    "decode_response",
    # 하이드레이션
    "Destination",
    "HydratableProtocol",
    "hydrate",
]
