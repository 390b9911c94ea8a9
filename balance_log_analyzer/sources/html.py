"""Saved HTML page source."""

from balance_log_analyzer.config import ParseOutcome
from balance_log_analyzer.parser import parse_clipboard
from balance_log_analyzer.registry import BalanceLogSourceRegistry
from balance_log_analyzer.sources.file import FileBalanceLogSource


@BalanceLogSourceRegistry.register
class HtmlFileBalanceLogSource(FileBalanceLogSource):
    """Parse balance-log rows from the largest table of a saved HTML page."""

    @classmethod
    def name(cls) -> str:
        """Return source name shown in app choices."""
        return "HTML table file"

    @classmethod
    def extensions(cls) -> tuple[str, ...]:
        """Return accepted input file extensions."""
        return (".html", ".htm")

    def load(self) -> ParseOutcome:
        """Parse best HTML table, falling back to the raw text."""
        content = self.read_text()
        return parse_clipboard(html=content, text=content)
