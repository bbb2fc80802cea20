from pathlib import Path
from unittest.mock import MagicMock

import pytest

from esquery.client import Elastic
from esquery.config import ESConfig
from esquery.templates import TemplateStore
from tests.helpers import ENDPOINT, FakeTransport, MemoryTemplateReader


@pytest.fixture
def es_config() -> ESConfig:
    return ESConfig(
        es_url=ENDPOINT,
        es_username=None,
        es_password=None,
        template_dir=Path("templates"),
        bulk_batch_size=2,
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def template_reader() -> MemoryTemplateReader:
    return MemoryTemplateReader(
        {
            "templates/by_name.json": (
                '{"query": {"match": {"name": "{{ data.name }}"}}, "size": {{ size }}}'
            ),
            "templates/match_all.json": '{"query": {"match_all": {}}}',
            "templates/page.json": '{"from": {{ from }}, "size": {{ size }}}',
            "templates/broken.json": '{"query": {% if %}}',
            "templates/needs_data.json": '{"query": {"term": {"id": "{{ data.missing }}"}}}',
        }
    )


@pytest.fixture
def template_store(template_reader) -> TemplateStore:
    return TemplateStore(template_reader)


@pytest.fixture
def mock_es() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(es_config, mock_es, transport, template_store) -> Elastic:
    return Elastic(es_config, es=mock_es, transport=transport, template_store=template_store)
