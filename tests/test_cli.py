"""Tests for the command-line interface."""

import json

import pytest

from taxdocs.cli import create_parser, main
from taxdocs.services.exporters import CSV_HEADERS


@pytest.fixture
def documents(tmp_path, dividend_statement, signed_agreement):
    (tmp_path / "dividend.txt").write_text(dividend_statement, encoding="utf-8")
    (tmp_path / "agreement.txt").write_text(signed_agreement, encoding="utf-8")
    return tmp_path


class TestCreateParser:
    def test_parse_defaults(self):
        args = create_parser().parse_args(["parse", "a.pdf"])
        assert args.format == "json"

    def test_batch_defaults(self):
        args = create_parser().parse_args(["batch-classify", "docs"])
        assert args.pattern == "*"
        assert args.workers is None

    def test_invalid_format_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["parse", "a.pdf", "--format", "xml"])


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: taxdocs" in capsys.readouterr().out


def test_configuration_error(monkeypatch, capsys):
    monkeypatch.setenv("CONFIDENCE_LOW", "0.95")
    assert main(["classify", "a.txt"]) == 1
    assert "Configuration error" in capsys.readouterr().err


class TestClassifyCommand:
    def test_classify(self, documents, capsys):
        exit_code = main(["classify", str(documents / "dividend.txt"), str(documents / "agreement.txt")])

        assert exit_code == 0
        rows = json.loads(capsys.readouterr().out)
        assert [(r["file"], r["type"]) for r in rows] == [
            ("dividend.txt", "dividend_statement"),
            ("agreement.txt", "contract"),
        ]
        assert all(r["recommendedAction"] == "accept" for r in rows)

    def test_missing_file(self, documents, capsys):
        exit_code = main(["classify", str(documents / "dividend.txt"), str(documents / "missing.txt")])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert len(json.loads(captured.out)) == 1
        assert "missing.txt" in captured.err


class TestParseCommand:
    def test_json(self, documents, capsys):
        assert main(["parse", str(documents / "agreement.txt")]) == 0

        body = json.loads(capsys.readouterr().out)
        assert body["contract"]["contract_number"]["value"] == "SA-2024-001"
        assert body["contract"]["key_dates"][0]["date"] == "2024-07-01"
        assert body["summary"]["party_count"] == 2

    def test_csv(self, documents, capsys):
        assert main(["parse", str(documents / "agreement.txt"), "-f", "csv"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == ",".join(CSV_HEADERS)
        assert lines[1].startswith("agreement.txt,Service Agreement,SA-2024-001,25000.0,2,")

    def test_unreadable_file(self, tmp_path, capsys):
        assert main(["parse", str(tmp_path / "nope.pdf")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestBatchClassifyCommand:
    def test_batch(self, documents, capsys):
        assert main(["batch-classify", str(documents), "--workers", "2"]) == 0

        out = capsys.readouterr().out
        assert "  agreement.txt: contract" in out
        assert "  dividend.txt: dividend_statement" in out
        assert "Classified 2/2 files" in out

    def test_pattern_filters_files(self, documents, capsys):
        assert main(["batch-classify", str(documents), "-p", "div*"]) == 0
        assert "Classified 1/1 files" in capsys.readouterr().out

    def test_not_a_directory(self, tmp_path, capsys):
        assert main(["batch-classify", str(tmp_path / "missing")]) == 1
        assert "Not a directory" in capsys.readouterr().err

    def test_no_matches(self, tmp_path, capsys):
        assert main(["batch-classify", str(tmp_path), "-p", "*.pdf"]) == 1
        assert "No files matching" in capsys.readouterr().out

    def test_invalid_workers(self, documents, capsys):
        assert main(["batch-classify", str(documents), "-w", "0"]) == 1
        assert "--workers must be at least 1" in capsys.readouterr().err
