"""Pasted-text balance-log source."""

from balance_log_analyzer.config import ParseOutcome, PromptValidator
from balance_log_analyzer.parser import parse_pasted_text
from balance_log_analyzer.registry import BalanceLogSourceRegistry
from balance_log_analyzer.sources.base import BalanceLogSource
from balance_log_analyzer.validators import validate_text


@BalanceLogSourceRegistry.register
class TextBalanceLogSource(BalanceLogSource):
    """Parse balance-log rows pasted straight into the prompt."""

    def __init__(self, text: str) -> None:
        """Store pasted text."""
        super().__init__()
        self.text = text

    @classmethod
    def name(cls) -> str:
        """Return source name shown in app choices."""
        return "Pasted text"

    @classmethod
    def validators(cls) -> dict[str, PromptValidator]:
        """Return constructor-attribute validators for pasted text."""
        return {"text": validate_text}

    @property
    def details(self) -> str:
        """Return line count of pasted text."""
        return f"Pasted lines: {len(self.text.strip().splitlines())}"

    def load(self) -> ParseOutcome:
        """Parse pasted text into rows."""
        return parse_pasted_text(self.text)
