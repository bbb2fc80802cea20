"""esquery 예외 정의.

검색 요청 빌드/전송/디코딩/하이드레이션 단계별 예외 타입.
엔진이 반환한 not-found / error 응답은 예외가 아니라 정상 결과로 취급합니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from esquery.search.response import SearchResponse


class ESQueryError(Exception):
    """esquery 기본 예외.

    Attributes:
        operation: 실패한 작업 이름 (예: "search.execute")
        cause: 원인 예외 (없으면 None)
    """

    def __init__(self, operation: str, message: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        text = f"{operation}: {message}"
        if cause is not None:
            text = f"{text} ({type(cause).__name__}: {cause})"
        super().__init__(text)


class TransportError(ESQueryError):
    """검색 엔진과의 HTTP 교환 자체가 실패한 경우. 재시도하지 않음."""


class DecodeError(ESQueryError):
    """응답 바이트가 JSON이 아니거나 엔벨로프 구조와 맞지 않는 경우."""


class TemplateError(ESQueryError):
    """템플릿 읽기/파싱/렌더링 실패.

    SearchService.template()는 이 예외를 로그로만 남기고 호출자에게 전파하지 않음.
    """


class HydrationError(ESQueryError):
    """hit payload를 destination 타입으로 변환하지 못한 경우.

    디코딩된 엔벨로프는 `response`로 그대로 보존되어 took, _shards 등
    메타데이터를 계속 확인할 수 있습니다.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        cause: BaseException | None = None,
        response: SearchResponse | None = None,
    ):
        super().__init__(operation, message, cause)
        self.response = response


class BulkError(ESQueryError):
    """bulk 색인 중 일부 또는 전체 문서가 실패한 경우.

    Attributes:
        failed: 실패한 항목 목록 (elasticsearch bulk 응답 item)
    """

    def __init__(
        self,
        operation: str,
        message: str,
        cause: BaseException | None = None,
        failed: list[dict] | None = None,
    ):
        super().__init__(operation, message, cause)
        self.failed = failed or []
