"""검색 요청 템플릿 저장소.

템플릿 원본은 `path/name` 키로 프로세스 전역 캐시에 한 번만 적재되고
이후 교체/삭제되지 않습니다. 렌더링은 Jinja2를 사용합니다.

Usage:
    >>> store = shared_template_store()
    >>> body = store.render("templates", "by_name.json", SearchTemplate(data={"name": "kim"}))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, StrictUndefined, TemplateError as JinjaTemplateError

from esquery.errors import TemplateError

logger = logging.getLogger(__name__)


def template_key(path: str | Path, name: str) -> str:
    """캐시 키 (`path/name`)."""
    return f"{path}/{name}"


class TemplateReaderProtocol(Protocol):
    """템플릿 원본 읽기 인터페이스. 캐시 miss일 때만 호출됨."""

    def read_bytes(self, key: str, options: Mapping[str, Any] | None = None) -> bytes: ...


class FileTemplateReader:
    """파일시스템에서 템플릿을 읽는 기본 구현체."""

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir

    def read_bytes(self, key: str, options: Mapping[str, Any] | None = None) -> bytes:
        path = self.base_dir / key if self.base_dir else Path(key)
        return path.read_bytes()


@dataclass
class SearchTemplate:
    """템플릿 렌더링 입력.

    Attributes:
        data: 템플릿에서 `data`로 참조하는 사용자 데이터
        from_: 템플릿에서 `from`으로 참조
        size: 템플릿에서 `size`로 참조
    """

    data: Any = None
    from_: int = 0
    size: int = 0

    def to_context(self) -> dict[str, Any]:
        ctx: dict[str, Any] = {}
        if self.data is not None:
            ctx["data"] = self.data
        ctx["from"] = self.from_
        ctx["size"] = self.size
        return ctx


def _to_context(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, SearchTemplate):
        return data.to_context()
    if isinstance(data, Mapping):
        return dict(data)
    return {"data": data}


class TemplateStore:
    """Write-once 템플릿 캐시 + 렌더러.

    - 키가 없을 때만 reader로 읽어서 저장 (이후 불변)
    - 확인/읽기/저장은 하나의 lock 안에서 수행해 같은 키를 두 번 읽지 않음
    - 이미 캐시된 키는 lock 없이 바로 반환 (double-checked locking)
    """

    def __init__(self, reader: TemplateReaderProtocol):
        self._reader = reader
        self._cache: dict[str, bytes] = {}
        self._lock = threading.Lock()
        self._env = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def __contains__(self, key: str) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def load(self, key: str, reload: bool = False) -> bytes:
        """캐시된 템플릿 원본 반환. 없으면 읽어서 캐시.

        Raises:
            TemplateError: 읽기 실패
        """
        source = self._cache.get(key)
        if source is not None:
            if reload:
                # TODO: reload 시 캐시 교체 여부가 정해지면 반영 (현재는 캐시 유지)
                logger.info(f"템플릿 reload 요청 무시, 캐시 사용: {key}")
            return source

        with self._lock:
            source = self._cache.get(key)
            if source is None:
                try:
                    source = self._reader.read_bytes(key, None)
                except Exception as e:
                    raise TemplateError("template.read", key, e) from e
                self._cache[key] = source
                logger.debug(f"템플릿 캐시 적재: {key} ({len(source)} bytes)")
        return source

    def render(self, path: str | Path, name: str, data: Any = None, reload: bool = False) -> bytes:
        """`path/name` 템플릿을 data로 렌더링한 바이트 반환.

        Raises:
            TemplateError: 읽기, 파싱, 렌더링 중 하나라도 실패
        """
        key = template_key(path, name)
        source = self.load(key, reload=reload)

        try:
            code = self._env.compile(source.decode("utf-8"), name=key, filename=key)
            template = self._env.template_class.from_code(self._env, code, self._env.make_globals(None))
        except (UnicodeDecodeError, JinjaTemplateError) as e:
            raise TemplateError("template.parse", key, e) from e

        try:
            rendered = template.render(_to_context(data))
        except Exception as e:
            raise TemplateError("template.execute", key, e) from e

        return rendered.encode("utf-8")


_shared_store: TemplateStore | None = None
_shared_lock = threading.Lock()


def shared_template_store() -> TemplateStore:
    """프로세스 전역 템플릿 저장소 (파일 reader, cwd 기준 경로)."""
    global _shared_store
    if _shared_store is None:
        with _shared_lock:
            if _shared_store is None:
                _shared_store = TemplateStore(FileTemplateReader())
    return _shared_store
