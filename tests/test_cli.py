import json
from unittest.mock import MagicMock, patch

import pytest

from esquery import cli
from tests.helpers import ERROR_RESPONSE, NOT_FOUND_RESPONSE, hits_response


@pytest.fixture
def cli_client(client, monkeypatch):
    monkeypatch.setenv("ES_URL", "http://localhost:9200")
    monkeypatch.setattr(cli, "_build_client", lambda cfg: client)
    return client


class TestSearchCommand:
    def test_prints_documents(self, cli_client, transport, capsys):
        transport.reply(hits_response({"a": 1}, {"a": 2}))

        code = cli.main(["search", "--index", "persons", "--from", "0", "--size", "2"])

        assert code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line) for line in lines] == [{"a": 1}, {"a": 2}]
        assert transport.last.url.endswith("/persons/_search?from=0&size=2")

    def test_body_file(self, cli_client, transport, tmp_path):
        body = tmp_path / "q.json"
        body.write_bytes(b'{"query": {"match_all": {}}}')

        cli.main(["search", "--index", "persons", "--body", str(body)])

        assert transport.last.method == "POST"
        assert transport.last.body == b'{"query": {"match_all": {}}}'

    def test_template(self, cli_client, transport):
        """Should wrap --data and pass --from/--size into the template context"""
        code = cli.main(
            [
                "search",
                "--index",
                "persons",
                "--size",
                "10",
                "--template",
                "by_name.json",
                "--template-path",
                "templates",
                "--data",
                '{"name": "kim"}',
            ]
        )

        assert code == 0
        assert transport.last.method == "POST"
        assert json.loads(transport.last.body) == {"query": {"match": {"name": "kim"}}, "size": 10}
        assert transport.last.url.endswith("/persons/_search?size=10")

    def test_template_first_page(self, cli_client, transport):
        cli.main(
            [
                "search",
                "--index",
                "persons",
                "--from",
                "0",
                "--size",
                "5",
                "--template",
                "page.json",
                "--template-path",
                "templates",
            ]
        )

        assert json.loads(transport.last.body) == {"from": 0, "size": 5}

    def test_not_found(self, cli_client, transport):
        transport.reply(NOT_FOUND_RESPONSE)
        assert cli.main(["search", "--index", "persons", "--id", "42"]) == 1

    def test_engine_error(self, cli_client, transport):
        transport.reply(ERROR_RESPONSE)
        assert cli.main(["search", "--index", "nope"]) == 1

    def test_decode_error(self, cli_client, transport):
        transport.reply(b"oops")
        assert cli.main(["search", "--index", "persons"]) == 2


class TestBulkCommand:
    def test_line_number_ids(self, cli_client, tmp_path, capsys):
        data = tmp_path / "docs.jsonl"
        data.write_text('{"name": "a"}\n\n{"name": "b"}\n', encoding="utf-8")

        with patch.object(cli_client, "bulk_create", return_value=2) as bulk_create:
            code = cli.main(["bulk", "--index", "persons", "--input", str(data)])

        assert code == 0
        index, pairs = bulk_create.call_args.args
        assert index == "persons"
        assert list(pairs) == [("1", {"name": "a"}), ("2", {"name": "b"})]
        assert "2 documents created" in capsys.readouterr().out

    def test_id_field(self, cli_client, tmp_path):
        data = tmp_path / "docs.jsonl"
        data.write_text('{"id": 7, "name": "a"}\n', encoding="utf-8")

        with patch.object(cli_client, "bulk_create", return_value=1) as bulk_create:
            cli.main(["bulk", "--index", "persons", "--input", str(data), "--id-field", "id"])

        _, pairs = bulk_create.call_args.args
        assert list(pairs) == [("7", {"id": 7, "name": "a"})]

    def test_missing_input(self, cli_client, tmp_path):
        assert cli.main(["bulk", "--index", "persons", "--input", str(tmp_path / "none.jsonl")]) == 1

    def test_invalid_line_indexes_nothing(self, cli_client, tmp_path, caplog):
        """Should reject the whole file before any batch is sent"""
        data = tmp_path / "docs.jsonl"
        data.write_text('{"name": "a"}\n{"name": \n', encoding="utf-8")

        with patch.object(cli_client, "bulk_create") as bulk_create:
            code = cli.main(["bulk", "--index", "persons", "--input", str(data)])

        assert code == 1
        bulk_create.assert_not_called()
        assert any(f"{data}:2" in r.getMessage() for r in caplog.records)

    def test_missing_id_field_indexes_nothing(self, cli_client, tmp_path, caplog):
        data = tmp_path / "docs.jsonl"
        data.write_text('{"id": 1, "name": "a"}\n\n{"name": "b"}\n', encoding="utf-8")

        with patch.object(cli_client, "bulk_create") as bulk_create:
            code = cli.main(["bulk", "--index", "persons", "--input", str(data), "--id-field", "id"])

        assert code == 1
        bulk_create.assert_not_called()
        assert any(f"{data}:3" in r.getMessage() for r in caplog.records)


class TestConfigLoading:
    def test_missing_es_url(self, monkeypatch, caplog):
        """Should exit with an error code instead of a traceback"""
        monkeypatch.delenv("ES_URL", raising=False)
        build_client = MagicMock()
        monkeypatch.setattr(cli, "_build_client", build_client)

        assert cli.main(["search", "--index", "persons"]) == 1
        build_client.assert_not_called()
        assert any("ES_URL" in r.getMessage() for r in caplog.records)

    def test_missing_config_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(cli, "_build_client", MagicMock())
        assert cli.main(["--config", str(tmp_path / "none.yaml"), "search", "--index", "persons"]) == 1
