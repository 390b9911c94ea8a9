"""Balance-log sources and source base classes."""

from balance_log_analyzer.sources.base import BalanceLogSource
from balance_log_analyzer.sources.file import FileBalanceLogSource
from balance_log_analyzer.sources.html import HtmlFileBalanceLogSource
from balance_log_analyzer.sources.text import TextBalanceLogSource
from balance_log_analyzer.sources.tsv import TsvFileBalanceLogSource

__all__ = [
    "BalanceLogSource",
    "FileBalanceLogSource",
    "HtmlFileBalanceLogSource",
    "TextBalanceLogSource",
    "TsvFileBalanceLogSource",
]
