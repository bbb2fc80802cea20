"""Test doubles and response payload builders."""

import json
import threading
import time
from dataclasses import dataclass
from typing import Any

from esquery.transport import TransportResponse

ENDPOINT = "http://localhost:9200"


@dataclass
class RecordedRequest:
    method: str
    url: str
    body: bytes | None
    content_type: str


class FakeTransport:
    """응답을 순서대로 돌려주고 요청을 기록하는 전송 계층."""

    def __init__(self):
        self.requests: list[RecordedRequest] = []
        self._responses: list[Any] = []

    def reply(self, payload: Any, status: int = 200) -> "FakeTransport":
        if isinstance(payload, (bytes, str)):
            body = payload.encode("utf-8") if isinstance(payload, str) else payload
        else:
            body = json.dumps(payload).encode("utf-8")
        self._responses.append(TransportResponse(status=status, body=body))
        return self

    def fail(self, error: Exception) -> "FakeTransport":
        self._responses.append(error)
        return self

    def send(self, method, url, body, content_type="application/json"):
        self.requests.append(RecordedRequest(method, url, body, content_type))
        if not self._responses:
            return TransportResponse(status=200, body=b"{}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


class MemoryTemplateReader:
    """dict 기반 템플릿 reader. 읽은 키를 기록."""

    def __init__(self, templates: dict[str, str] | None = None, delay_s: float = 0.0):
        self.templates = dict(templates or {})
        self.delay_s = delay_s
        self.reads: list[str] = []
        self._lock = threading.Lock()

    def read_bytes(self, key, options=None):
        with self._lock:
            self.reads.append(key)
        if self.delay_s:
            time.sleep(self.delay_s)
        return self.templates[key].encode("utf-8")


def hits_response(*sources: Any, took: int = 5, **extra: Any) -> dict[str, Any]:
    """hit 목록 응답 payload."""
    body = {
        "took": took,
        "timed_out": False,
        "_shards": {"total": 1, "successful": 1, "skipped": 0, "failed": 0},
        "hits": {
            "total": {"value": len(sources), "relation": "eq"},
            "max_score": 1.0,
            "hits": [
                {
                    "_index": "persons",
                    "_type": "_doc",
                    "_id": str(i + 1),
                    "_score": 1.0,
                    "_source": source,
                }
                for i, source in enumerate(sources)
            ],
        },
    }
    body.update(extra)
    return body


NOT_FOUND_RESPONSE = {"_index": "persons", "_type": "_doc", "_id": "42", "found": False}

DOCUMENT_RESPONSE = {
    "_index": "persons",
    "_type": "_doc",
    "_id": "42",
    "found": True,
    "_source": {"name": "kim", "age": 42},
}

ERROR_RESPONSE = {
    "error": {
        "root_cause": [{"type": "index_not_found_exception", "reason": "no such index [nope]"}],
        "type": "index_not_found_exception",
        "reason": "no such index [nope]",
    },
    "status": 404,
}
