import json

import pytest

from esquery.search import DictQuery


class TestDictQuery:
    def test_serializes_mapping(self):
        assert json.loads(DictQuery({"query": {"term": {"name": "김"}}}).to_bytes()) == {
            "query": {"term": {"name": "김"}}
        }

    def test_keeps_non_ascii_unescaped(self):
        assert "김".encode("utf-8") in DictQuery({"name": "김"}).to_bytes()

    def test_unserializable_body_raises(self):
        """Should raise on values JSON cannot encode"""
        with pytest.raises(TypeError):
            DictQuery({"when": object()}).to_bytes()
