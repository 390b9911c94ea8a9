"""File-backed balance-log source base class."""

from abc import abstractmethod
from functools import partial
from pathlib import Path

from balance_log_analyzer.config import PromptValidator
from balance_log_analyzer.sources.base import BalanceLogSource


def _validate_file_input(raw: str, extensions: tuple[str, ...]) -> bool | str:
    """Validate non-empty, existing, extension-matching file input."""
    if not (text := raw.strip()):
        return "This field is required."
    if not (path := Path(text).expanduser().resolve()).is_file():
        return "Path must be a file."
    if path.suffix.lower() not in extensions:
        return f"Only {', '.join(extensions)} files are supported."
    return True


class FileBalanceLogSource(BalanceLogSource):
    """Base class for file-backed sources."""

    def __init__(self, path: Path | str) -> None:
        """Store one input file path."""
        super().__init__()
        self.path = Path(path).expanduser().resolve()

    @classmethod
    @abstractmethod
    def extensions(cls) -> tuple[str, ...]:
        """Return accepted lowercase file extensions used for validation."""

    @classmethod
    def validators(cls) -> dict[str, PromptValidator]:
        """Return constructor-attribute validators for file source prompts."""
        return {"path": partial(_validate_file_input, extensions=cls.extensions())}

    @property
    def details(self) -> str:
        """Return details row for file-backed source."""
        return f"File: {self.path.name}"

    def read_text(self) -> str:
        """Return file contents decoded as UTF-8."""
        return self.path.read_text(encoding="utf-8")
