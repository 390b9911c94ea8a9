"""Exact, exponent-free number formatting and UTC time rendering."""

import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from balance_log_analyzer.config import EPS, FINAL_DUST_THRESHOLD

MINUS_SIGN = "−"


def _to_float(value: float | str) -> float:
    """Coerce numeric input to float, mapping unparseable text to NaN."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _would_use_exponent(value: float) -> bool:
    """Return whether a plain number-to-string conversion would emit an exponent."""
    magnitude = abs(value)
    return magnitude < 1e-6 or magnitude >= 1e21


def _expand(value: float, max_dp: int) -> str:
    """Expand value to fixed point without losing its shortest decimal digits."""
    if not _would_use_exponent(value):
        return format(Decimal(repr(value)), "f")
    if abs(value) >= 1e21:
        return str(int(value))
    quantum = Decimal(1).scaleb(-max_dp)
    return format(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP), "f")


def fmt_trim(value: float | str, max_dp: int = 20) -> str:
    """Format number as trimmed decimal text, never using scientific notation."""
    number = _to_float(value)
    if not math.isfinite(number) or abs(number) < EPS:
        return "0"
    text = _expand(number, max_dp)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text.startswith("."):
        text = f"0{text}"
    elif text.startswith("-."):
        text = f"-0{text[1:]}"
    return "0" if text in {"-0", ""} else text


def fmt(value: float | str) -> str:
    """Format number for tables and audit text, rounding exponent values to 12 places."""
    return fmt_trim(value, 12)


def fmt_signed(value: float | str) -> str:
    """Format number with explicit plus sign or typographic minus sign."""
    number = _to_float(value)
    number = number if math.isfinite(number) else 0.0
    sign = "+" if number >= 0 else MINUS_SIGN
    return f"{sign}{fmt_trim(abs(number))}"


def fmt_abs(value: float) -> str:
    """Format absolute value of a number."""
    return fmt_trim(abs(value))


def fmt_money(value: float, asset: str) -> str:
    """Format amount with two decimals and asset label, e.g. '+5.00 USDT'."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f} {asset}"


def fmt_final(value: float) -> str:
    """Format final balance, showing near-zero dust as '0.0000'."""
    return "0.0000" if abs(value) < FINAL_DUST_THRESHOLD else fmt_trim(value)


def non_zero(value: float) -> bool:
    """Return whether value is significantly different from zero."""
    return abs(value) > EPS


def format_time(ts: float, offset_hours: float = 0) -> str:
    """Render UTC milliseconds shifted by a fixed offset as 'YYYY-MM-DD HH:MM:SS'."""
    shifted = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(
        milliseconds=ts + offset_hours * 3600 * 1000
    )
    return shifted.strftime("%Y-%m-%d %H:%M:%S")
