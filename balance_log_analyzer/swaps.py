"""Grouping of coin-swap and auto-exchange legs, plus event-contract totals."""

import math
import re
from collections.abc import Callable, Iterable

from balance_log_analyzer.aggregation import sum_by_asset
from balance_log_analyzer.config import TYPE, Row, SwapLine, TotalsMap
from balance_log_analyzer.formatting import MINUS_SIGN, fmt_trim

SWAP_KINDS = ("COIN_SWAP", "AUTO_EXCHANGE")

_SWAP_TEXT_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$", re.ASCII)
_SIDE_PREFIX_RE = re.compile(r"^\s*(Out|In):\s*", re.IGNORECASE)


def _matcher(kind: str) -> Callable[[str], bool]:
    """Return type predicate for one swap kind."""
    if kind == "COIN_SWAP":
        return lambda type_name: "COIN_SWAP" in type_name
    if kind == "AUTO_EXCHANGE":
        return lambda type_name: type_name == TYPE.AUTO_EXCHANGE
    raise ValueError(f"Unsupported swap kind: {kind!r}.")


def swap_group_key(row: Row) -> str:
    """Return key joining legs of one swap: time plus extra text before '@'."""
    return f"{row.time}|{row.extra.split('@')[0]}"


def _describe_group(group: list[Row]) -> str | None:
    """Render one group's net per-asset flows, or None when every asset nets to zero."""
    by_asset: dict[str, float] = {}
    for row in group:
        by_asset[row.asset] = by_asset.get(row.asset, 0.0) + row.amount
    outs = [
        f"{MINUS_SIGN}{fmt_trim(abs(amount))} {asset}"
        for asset, amount in by_asset.items()
        if amount < 0
    ]
    ins = [f"+{fmt_trim(amount)} {asset}" for asset, amount in by_asset.items() if amount > 0]
    if not outs and not ins:
        return None
    parts = []
    if outs:
        parts.append(f"Out: {', '.join(outs)}")
    if ins:
        parts.append(f"In: {', '.join(ins)}")
    return f"{group[0].time} — {'  →  '.join(parts)}"


def _ts_sort_key(line: SwapLine) -> tuple[bool, float]:
    """Sort by timestamp, placing unparsed timestamps last."""
    missing = math.isnan(line.ts)
    return missing, 0.0 if missing else line.ts


def group_swaps(rows: Iterable[Row], kind: str) -> list[SwapLine]:
    """Collapse paired swap legs into one directional line per event, oldest first."""
    matches = _matcher(kind)
    groups: dict[str, list[Row]] = {}
    for row in rows:
        if matches(row.type):
            groups.setdefault(swap_group_key(row), []).append(row)
    lines = []
    for group in groups.values():
        if (text := _describe_group(group)) is not None:
            lines.append(SwapLine(time=group[0].time, ts=group[0].ts, text=text))
    return sorted(lines, key=_ts_sort_key)


def event_totals(rows: Iterable[Row]) -> tuple[TotalsMap, TotalsMap]:
    """Return event-contract order totals and payout totals, each keyed by asset."""
    rows = list(rows)
    orders = sum_by_asset(row for row in rows if row.type == TYPE.EVENT_CONTRACTS_ORDER)
    payouts = sum_by_asset(row for row in rows if row.type == TYPE.EVENT_CONTRACTS_PAYOUT)
    return orders, payouts


def split_swap_text(line: SwapLine) -> tuple[str, str, str]:
    """Split a swap line into date, outflow and inflow display columns."""
    guess = line.text[:19]
    date = guess if _SWAP_TEXT_DATE_RE.match(guess) else line.time
    _, _, flows = line.text.partition("—")
    sides = {"out": "", "in": ""}
    for segment in flows.split("→"):
        if match := _SIDE_PREFIX_RE.match(segment):
            sides[match.group(1).lower()] = segment[match.end() :].strip()
    return date, sides["out"], sides["in"]
