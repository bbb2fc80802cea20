"""Elasticsearch 설정 관리.

환경변수(.env 포함)로 설정을 관리합니다.
YAML 파일의 `elastic` 섹션으로 일부 값을 덮어쓸 수 있습니다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

import yaml
from dotenv import load_dotenv

load_dotenv()


def _get_template_dir() -> Path:
    """기본 템플릿 디렉토리 경로."""
    return Path(os.getenv("ES_TEMPLATE_DIR", "./templates"))


def _flatten_config(config: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """중첩된 config를 flat하게 변환

    예: {"bulk": {"batch_size": 100}} -> {"bulk_batch_size": 100}
    """
    flat = {}
    for key, value in config.items():
        full_key = f"{prefix}{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(_flatten_config(value, f"{full_key}_"))
        else:
            flat[full_key] = value
    return flat


@dataclass(frozen=True)
class ESConfig:
    """Elasticsearch 연결 및 요청 설정.

    Attributes:
        es_url: Elasticsearch 서버 URL (예: http://localhost:9200)
        es_username: HTTP Basic Auth 사용자명 (선택)
        es_password: HTTP Basic Auth 비밀번호 (선택)
        verify_certs: SSL 인증서 검증 여부
        request_timeout_s: 요청 타임아웃 (초). 타임아웃은 클라이언트에 위임
        template_dir: 검색 템플릿 기본 디렉토리
        bulk_batch_size: bulk 색인 한 번에 보낼 문서 수
    """

    _yaml_section: ClassVar[str] = "elastic"
    _yaml_key_mapping: ClassVar[dict[str, str]] = {
        "url": "es_url",
        "username": "es_username",
        "password": "es_password",
        "verify_certs": "verify_certs",
        "request_timeout_s": "request_timeout_s",
        "template_dir": "template_dir",
        "bulk_batch_size": "bulk_batch_size",
    }

    # Connection
    es_url: str = field(default_factory=lambda: os.environ["ES_URL"])
    es_username: str | None = field(default_factory=lambda: os.getenv("ES_USERNAME"))
    es_password: str | None = field(default_factory=lambda: os.getenv("ES_PASSWORD"))

    verify_certs: bool = field(
        default_factory=lambda: os.getenv("ES_VERIFY_CERTS", "true").lower() == "true"
    )
    request_timeout_s: int = field(
        default_factory=lambda: int(os.getenv("ES_REQUEST_TIMEOUT_S", "30"))
    )

    # Templates
    template_dir: Path = field(default_factory=_get_template_dir)

    # Bulk
    bulk_batch_size: int = field(
        default_factory=lambda: int(os.getenv("ES_BULK_BATCH_SIZE", "100"))
    )

    @property
    def endpoint(self) -> str:
        """끝의 '/'를 제거한 엔드포인트 URL."""
        return self.es_url.rstrip("/")

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ESConfig:
        """YAML 파일에서 Config 생성

        `elastic` 섹션만 읽고, 없는 키는 환경변수 기본값을 사용.
        """
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        flat_config = _flatten_config(yaml_config.get(cls._yaml_section) or {})

        kwargs: dict[str, Any] = {}
        for yaml_key, attr_name in cls._yaml_key_mapping.items():
            if yaml_key in flat_config:
                kwargs[attr_name] = flat_config[yaml_key]

        if "template_dir" in kwargs:
            kwargs["template_dir"] = Path(kwargs["template_dir"])

        return cls(**kwargs)
