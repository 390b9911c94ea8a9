"""Abstract base class for all balance-log sources."""

from abc import ABC, abstractmethod

from balance_log_analyzer.config import ParseOutcome, PromptValidator


class BalanceLogSource(ABC):
    """Abstract base class for all balance-log sources."""

    @classmethod
    @abstractmethod
    def name(cls) -> str:
        """Return source name shown in app choices."""

    @classmethod
    @abstractmethod
    def validators(cls) -> dict[str, PromptValidator]:
        """Return constructor-attribute validators used by prompt builder."""

    @property
    @abstractmethod
    def details(self) -> str:
        """Return one-line details string shown after loading."""

    @abstractmethod
    def load(self) -> ParseOutcome:
        """Read the source and parse it into rows."""
