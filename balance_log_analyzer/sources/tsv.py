"""Tab- or space-delimited export file source."""

from balance_log_analyzer.config import ParseOutcome
from balance_log_analyzer.parser import parse_pasted_text
from balance_log_analyzer.registry import BalanceLogSourceRegistry
from balance_log_analyzer.sources.file import FileBalanceLogSource


@BalanceLogSourceRegistry.register
class TsvFileBalanceLogSource(FileBalanceLogSource):
    """Parse balance-log rows from a saved text export."""

    @classmethod
    def name(cls) -> str:
        """Return source name shown in app choices."""
        return "Text export file"

    @classmethod
    def extensions(cls) -> tuple[str, ...]:
        """Return accepted input file extensions."""
        return (".tsv", ".txt")

    def load(self) -> ParseOutcome:
        """Parse file text into rows."""
        return parse_pasted_text(self.read_text())
