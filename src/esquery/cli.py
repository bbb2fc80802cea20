"""esquery 커맨드라인 도구.

검색 결과를 JSON Lines로 출력하거나 JSONL 문서를 bulk create 합니다.

Usage:
    esquery search --index persons --id 42
    esquery search --index persons --from 0 --size 10 --body query.json
    esquery search --index persons --template by_name.json --data '{"name": "kim"}'
    esquery bulk --index persons --input ./data/persons.jsonl --id-field id
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from esquery.client import Elastic
from esquery.config import ESConfig
from esquery.errors import ESQueryError
from esquery.search import Destination
from esquery.templates import SearchTemplate

logger = logging.getLogger(__name__)


def _build_client(cfg: ESConfig) -> Elastic:
    return Elastic(cfg)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="esquery", description="Elasticsearch 검색/대량 색인")
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="YAML 설정 파일 (elastic 섹션). 없으면 환경변수 사용",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="DEBUG 로그 출력")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="검색 후 문서를 JSON Lines로 출력")
    search.add_argument("--index", "-i", required=True, help="대상 인덱스")
    search.add_argument("--id", default=None, help="문서 ID (단건 조회)")
    search.add_argument("--from", dest="from_", type=int, default=None, help="시작 offset")
    search.add_argument("--size", type=int, default=None, help="반환 결과 수")
    search.add_argument("--scroll", default=None, help="scroll 유지 시간 (예: 1m)")
    search.add_argument("--body", type=str, default=None, help="요청 본문 JSON 파일")
    search.add_argument("--template", type=str, default=None, help="템플릿 이름")
    search.add_argument(
        "--template-path",
        type=str,
        default=None,
        help="템플릿 디렉토리 (기본: ES_TEMPLATE_DIR)",
    )
    search.add_argument("--data", type=str, default=None, help="템플릿 data (JSON 문자열)")

    bulk = sub.add_parser("bulk", help="JSONL 문서를 bulk create")
    bulk.add_argument("--index", "-i", required=True, help="대상 인덱스")
    bulk.add_argument("--input", required=True, help="JSONL 파일 경로")
    bulk.add_argument(
        "--id-field",
        default=None,
        help="문서 ID로 사용할 필드 (없으면 1부터 줄 번호)",
    )
    bulk.add_argument("--refresh", action="store_true", help="색인 후 refresh 대기")

    return parser


def _run_search(client: Elastic, cfg: ESConfig, args: argparse.Namespace) -> int:
    service = client.search().index(args.index)
    if args.id:
        service.id(args.id)
    if args.from_ is not None:
        service.from_(args.from_)
    if args.size is not None:
        service.size(args.size)
    if args.scroll:
        service.scroll(args.scroll)
    if args.body:
        service.body(Path(args.body).read_bytes())
    if args.template:
        template_data = SearchTemplate(
            data=json.loads(args.data) if args.data else None,
            from_=args.from_ or 0,
            size=args.size or 0,
        )
        path = args.template_path or str(cfg.template_dir)
        service.template(path, args.template, template_data)

    out: Destination[Any] = Destination()
    resp = service.object(out).execute()

    if resp.is_error:
        logger.error(f"검색 에러 (status={resp.status}): {resp.error_reason}")
        return 1
    if resp.is_not_found:
        logger.warning(f"문서를 찾을 수 없습니다: {resp.index}/{resp.id}")
        return 1

    logger.info(
        f"took={resp.took}ms total={resp.hits.total} "
        f"shards={resp.shards.successful}/{resp.shards.total}"
    )
    for doc in out:
        print(json.dumps(doc, ensure_ascii=False))
    return 0


def _read_jsonl(path: Path, id_field: str | None) -> list[tuple[str, Any]]:
    """JSONL 파일을 (id, 문서) 목록으로 읽기.

    색인 전에 전체 파일을 검증하므로 잘못된 줄이 있으면 아무것도 색인하지 않습니다.
    id_field가 없으면 빈 줄을 제외한 문서 순번(1부터)을 ID로 사용합니다.

    Raises:
        ValueError: JSON 파싱 실패, 객체가 아닌 줄, id_field 누락 (파일 줄 번호 포함)
    """
    pairs: list[tuple[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                doc = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_no}: JSON 파싱 실패 ({e.msg})") from e
            if not isinstance(doc, dict):
                raise ValueError(f"{path}:{line_no}: JSON 객체가 아닙니다")
            if id_field:
                if id_field not in doc:
                    raise ValueError(f"{path}:{line_no}: '{id_field}' 필드가 없습니다")
                doc_id = str(doc[id_field])
            else:
                doc_id = str(len(pairs) + 1)
            pairs.append((doc_id, doc))
    return pairs


def _run_bulk(client: Elastic, args: argparse.Namespace) -> int:
    path = Path(args.input)
    if not path.exists():
        logger.error(f"입력 파일을 찾을 수 없습니다: {path}")
        return 1

    try:
        pairs = _read_jsonl(path, args.id_field)
    except ValueError as e:
        logger.error(f"입력 파일 오류, 색인하지 않음: {e}")
        return 1

    count = client.bulk_create(args.index, pairs, refresh=args.refresh)
    print(f"{count} documents created in {args.index}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        cfg = ESConfig.from_yaml(args.config) if args.config else ESConfig()
        client = _build_client(cfg)
    except KeyError as e:
        logger.error(f"환경변수 {e} 를 설정하세요.")
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"설정 로드 실패: {e}")
        return 1

    try:
        if args.command == "search":
            return _run_search(client, cfg, args)
        return _run_bulk(client, args)
    except ESQueryError as e:
        logger.error(f"{args.command} 실패: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
