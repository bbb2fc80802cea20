"""HTTP 전송 계층.

검색 코어는 `send(method, url, body, content_type)` 하나만 사용합니다.
연결 관리, TLS, 소켓 재시도, 타임아웃은 elasticsearch 클라이언트에 위임합니다.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

from elasticsearch import ApiError, Elasticsearch
from elasticsearch import TransportError as ESTransportError

from esquery.errors import TransportError

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"


@dataclass(frozen=True)
class TransportResponse:
    """HTTP 교환 결과 (상태 코드 + 원본 바이트)."""

    status: int
    body: bytes


class TransportProtocol(Protocol):
    """전송 인터페이스.

    HTTP 상태 코드는 해석하지 않습니다. 엔진 에러는 payload 형태로 판별합니다.
    전송 자체가 실패하면 esquery.errors.TransportError를 발생시켜야 합니다.
    """

    def send(
        self,
        method: str,
        url: str,
        body: bytes | None,
        content_type: str = CONTENT_TYPE_JSON,
    ) -> TransportResponse: ...


def _body_to_bytes(body: object) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class ElasticsearchTransport:
    """elasticsearch 클라이언트 기반 전송 구현체.

    URL의 path + query 부분만 사용하고 호스트는 클라이언트 설정을 따릅니다.
    4xx/5xx 응답(ApiError)은 예외가 아니라 상태 코드와 본문으로 반환합니다.
    """

    def __init__(self, es: Elasticsearch):
        self.es = es

    def send(
        self,
        method: str,
        url: str,
        body: bytes | None,
        content_type: str = CONTENT_TYPE_JSON,
    ) -> TransportResponse:
        parts = urlsplit(url)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"

        headers = {"accept": CONTENT_TYPE_JSON}
        if body is not None:
            headers["content-type"] = content_type

        try:
            resp = self.es.perform_request(method, target, headers=headers, body=body)
        except ApiError as e:
            # 엔진이 반환한 에러 payload는 디코더에서 판별
            return TransportResponse(status=e.meta.status, body=_body_to_bytes(e.body))
        except ESTransportError as e:
            logger.error(f"{method} {target} 전송 실패: {e}")
            raise TransportError("transport.send", f"{method} {target}", e) from e

        return TransportResponse(status=resp.meta.status, body=_body_to_bytes(resp.body))
