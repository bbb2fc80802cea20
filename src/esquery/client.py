"""Elasticsearch 클라이언트 팩토리 및 esquery 진입점.

Usage:
    >>> cfg = ESConfig()
    >>> client = Elastic(cfg)
    >>> resp = client.search().index("persons").id("42").execute()
    >>> client.bulk_create("persons", [("1", {"name": "kim"})])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from elasticsearch import Elasticsearch
from elasticsearch import TransportError as ESTransportError
from elasticsearch.helpers import BulkIndexError, bulk

from esquery.config import ESConfig
from esquery.errors import BulkError, TransportError
from esquery.search import SearchService
from esquery.templates import TemplateStore, shared_template_store
from esquery.transport import ElasticsearchTransport, TransportProtocol

logger = logging.getLogger(__name__)


def create_es_client(cfg: ESConfig | None = None) -> Elasticsearch:
    """Elasticsearch 클라이언트 생성.

    Args:
        cfg: ES 설정. None이면 기본 설정 사용.

    Returns:
        Elasticsearch 클라이언트 인스턴스.

    Raises:
        ValueError: ES_URL이 설정되지 않은 경우.
    """
    if cfg is None:
        cfg = ESConfig()

    if not cfg.es_url:
        raise ValueError("ES_URL 환경변수를 설정하세요.")

    kwargs: dict[str, Any] = {
        "hosts": [cfg.es_url],
        "verify_certs": cfg.verify_certs,
        "request_timeout": cfg.request_timeout_s,
    }
    if cfg.es_username and cfg.es_password:
        kwargs["basic_auth"] = (cfg.es_username, cfg.es_password)

    logger.debug(f"ES 클라이언트 생성: {cfg.endpoint} (auth={'basic_auth' in kwargs})")
    return Elasticsearch(**kwargs)


def check_connection(es: Elasticsearch) -> bool:
    """ping 결과를 bool로 반환. 연결 실패는 False로 기록."""
    try:
        return bool(es.ping())
    except ESTransportError as e:
        logger.warning(f"ES 연결 실패: {e}")
        return False


class Elastic:
    """설정, 전송 계층, 템플릿 저장소를 묶은 클라이언트.

    search()는 호출할 때마다 새 SearchService를 반환하므로
    스레드마다 별도 빌더를 사용할 수 있습니다.
    템플릿 저장소는 지정하지 않으면 프로세스 전역 저장소를 공유합니다.
    """

    def __init__(
        self,
        cfg: ESConfig | None = None,
        *,
        es: Elasticsearch | None = None,
        transport: TransportProtocol | None = None,
        template_store: TemplateStore | None = None,
    ):
        self.cfg = cfg if cfg is not None else ESConfig()
        self.es = es if es is not None else create_es_client(self.cfg)
        self.transport = transport if transport is not None else ElasticsearchTransport(self.es)
        self.templates = template_store if template_store is not None else shared_template_store()

    def search(self) -> SearchService:
        return SearchService(self.transport, self.cfg.endpoint, self.templates)

    def ping(self) -> bool:
        return check_connection(self.es)

    def bulk_create(
        self,
        index: str,
        docs: Iterable[tuple[str, Any]],
        refresh: bool = False,
    ) -> int:
        """(id, document) 쌍을 create 방식으로 대량 색인. 성공 건수 반환.

        Raises:
            BulkError: 일부 문서 색인 실패 (이미 존재하는 id 포함)
            TransportError: 전송 실패
        """

        def _actions() -> Iterator[dict[str, Any]]:
            for doc_id, doc in docs:
                yield {
                    "_op_type": "create",
                    "_index": index,
                    "_id": doc_id,
                    "_source": doc,
                }

        try:
            ok, _ = bulk(
                self.es,
                _actions(),
                chunk_size=self.cfg.bulk_batch_size,
                refresh="wait_for" if refresh else False,
            )
        except BulkIndexError as e:
            logger.error(f"bulk 색인 실패 ({index}): {len(e.errors)}건")
            raise BulkError("bulk.create", f"{len(e.errors)} documents failed", e, e.errors) from e
        except ESTransportError as e:
            logger.error(f"bulk 전송 실패 ({index}): {e}")
            raise TransportError("bulk.create", index, e) from e

        logger.info(f"bulk 색인 완료 ({index}): {ok}건")
        return int(ok)
