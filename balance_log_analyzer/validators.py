"""Shared input validators used across sources and UI prompts."""

from balance_log_analyzer.audit import parse_baseline
from balance_log_analyzer.errors import BaselineParseError
from balance_log_analyzer.parser import parse_amount, parse_utc


def validate_timestamp(raw: str) -> bool | str:
    """Validate optional 'YYYY-MM-DD HH:MM:SS' UTC timestamp input."""
    if not (text := raw.strip()):
        return True
    if parse_utc(text) is None:
        return "Time must look like YYYY-MM-DD HH:MM:SS."
    return True


def validate_amount(raw: str) -> bool | str:
    """Validate optional numeric amount input."""
    if not raw.strip():
        return True
    if parse_amount(raw) is None:
        return "Amount must be a number."
    return True


def validate_asset(raw: str) -> bool | str:
    """Validate optional asset code input."""
    if not (text := raw.strip()):
        return True
    if not text.replace("_", "").isalnum() or not text.isascii():
        return "Asset must contain only letters, digits and underscores."
    return True


def validate_baseline(raw: str) -> bool | str:
    """Validate optional multi-line baseline balances input."""
    try:
        parse_baseline(raw)
    except BaselineParseError as error:
        return str(error)
    return True


def validate_text(raw: str) -> bool | str:
    """Validate non-empty text input."""
    if not raw.strip():
        return "This field is required."
    return True
