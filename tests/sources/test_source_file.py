"""Tests for file-backed source base class and the text export source."""

from pathlib import Path

from conftest import tsv_line

from balance_log_analyzer.config import ParseOutcome
from balance_log_analyzer.sources import FileBalanceLogSource, TsvFileBalanceLogSource


class DummyJsonSource(FileBalanceLogSource):
    """Concrete file source for base behavior tests."""

    @classmethod
    def name(cls) -> str:
        """Return source name."""
        return "Dummy JSON"

    @classmethod
    def extensions(cls) -> tuple[str, ...]:
        """Return accepted extensions for this test source."""
        return (".json",)

    def load(self) -> ParseOutcome:
        """Return empty outcome."""
        return ParseOutcome()


def test_file_source_accepts_string_path() -> None:
    """File source should accept string path and store it resolved."""
    source = DummyJsonSource("export.json")
    assert source.path == Path("export.json").resolve()
    assert source.details == "File: export.json"


def test_file_source_validator_rules(tmp_path: Path) -> None:
    """Path validator should require an existing file with an accepted extension."""
    validate = DummyJsonSource.validators()["path"]
    valid = tmp_path / "export.JSON"
    wrong = tmp_path / "export.csv"
    valid.write_text("{}", encoding="utf-8")
    wrong.write_text("x", encoding="utf-8")
    assert validate("  ") == "This field is required."
    assert validate(str(tmp_path / "missing.json")) == "Path must be a file."
    assert validate(str(tmp_path)) == "Path must be a file."
    assert validate(str(wrong)) == "Only .json files are supported."
    assert validate(f" {valid} ") is True


def test_tsv_source_lists_both_extensions(tmp_path: Path) -> None:
    """Text export source should accept .tsv and .txt files."""
    validate = TsvFileBalanceLogSource.validators()["path"]
    html = tmp_path / "export.html"
    html.write_text("x", encoding="utf-8")
    assert validate(str(html)) == "Only .tsv, .txt files are supported."


def test_tsv_source_loads_rows(tmp_path: Path) -> None:
    """Text export source should parse rows from UTF-8 file content."""
    path = tmp_path / "export.tsv"
    path.write_text(
        "\n".join(
            [
                tsv_line("Id", "UID", "Asset", "Type", "Amount", "Time", "Symbol"),
                tsv_line(
                    "1", "u1", "USDT", "FUNDING_FEE", "-0.5", "2023-01-01 08:00:00", "BTCUSDT"
                ),
            ]
        ),
        encoding="utf-8",
    )
    outcome = TsvFileBalanceLogSource(path).load()
    assert [(row.type, row.amount, row.symbol) for row in outcome.rows] == [
        ("FUNDING_FEE", -0.5, "BTCUSDT")
    ]
    assert outcome.message == ""


def test_tsv_source_reports_empty_file(tmp_path: Path) -> None:
    """Files without valid rows should carry the empty-result advisory."""
    path = tmp_path / "export.txt"
    path.write_text("nothing useful\n", encoding="utf-8")
    outcome = TsvFileBalanceLogSource(path).load()
    assert not outcome.ok
    assert outcome.message == "No valid rows detected."
