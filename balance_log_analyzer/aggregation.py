"""Aggregation of signed row amounts into per-asset and per-type totals."""

import math
import re
from collections.abc import Iterable

from balance_log_analyzer.config import (
    Row,
    RowFilters,
    SummaryRow,
    Totals,
    TotalsByType,
    TotalsMap,
)
from balance_log_analyzer.formatting import MINUS_SIGN, fmt, fmt_trim, non_zero
from balance_log_analyzer.parser import parse_utc


def sum_by_asset(rows: Iterable[Row]) -> TotalsMap:
    """Fold rows into pos/neg/net buckets keyed by asset."""
    totals: TotalsMap = {}
    for row in rows:
        totals.setdefault(row.asset, Totals()).add(row.amount)
    return totals


def totals_by_type(rows: Iterable[Row]) -> TotalsByType:
    """Fold rows into buckets keyed by raw type, then by asset."""
    totals: TotalsByType = {}
    for row in rows:
        totals.setdefault(row.type, {}).setdefault(row.asset, Totals()).add(row.amount)
    return totals


def group_by_type_and_asset(rows: Iterable[Row]) -> TotalsByType:
    """Group rows by type (unknown marker for empty types) and sum each group by asset."""
    grouped: dict[str, list[Row]] = {}
    for row in rows:
        grouped.setdefault(row.type_key, []).append(row)
    return {type_key: sum_by_asset(group) for type_key, group in grouped.items()}


def type_magnitude(totals: TotalsMap) -> float:
    """Return ranking magnitude of one type: sum of |net| + pos + neg over assets."""
    return sum(abs(bucket.net) + bucket.pos + bucket.neg for bucket in totals.values())


def rank_types(totals: TotalsByType) -> list[tuple[str, TotalsMap]]:
    """Order types by descending total magnitude."""
    return sorted(totals.items(), key=lambda item: type_magnitude(item[1]), reverse=True)


def _rounded(value: float) -> float:
    """Return value rounded through the table formatter, zero when insignificant."""
    return float(fmt(value)) if non_zero(value) else 0.0


def build_summary_rows(rows: Iterable[Row]) -> list[SummaryRow]:
    """Build sorted type/asset summary rows, dropping all-zero buckets."""
    summary = []
    for type_key, by_asset in totals_by_type(rows).items():
        for asset, bucket in by_asset.items():
            in_, out, net = _rounded(bucket.pos), _rounded(bucket.neg), _rounded(bucket.net)
            if in_ or out or net:
                summary.append(SummaryRow(label=type_key, asset=asset, in_=in_, out=out, net=net))
    return sorted(summary, key=lambda row: (row.label, row.asset))


def totals_parts(bucket: Totals) -> str:
    """Render one bucket as '+pos  −neg  = net', omitting zero sides."""
    parts = []
    if bucket.pos != 0:
        parts.append(f"+{fmt_trim(bucket.pos)}")
    if bucket.neg != 0:
        parts.append(f"{MINUS_SIGN}{fmt_trim(bucket.neg)}")
    parts.append(f"= {fmt_trim(bucket.net)}")
    return "  ".join(parts)


def _filter_bound(text: str, unbounded: float) -> float:
    """Return bound timestamp; empty text is unbounded and unparseable text matches nothing."""
    if not text:
        return unbounded
    ts = parse_utc(text)
    return math.nan if ts is None else ts


def filter_rows(rows: Iterable[Row], filters: RowFilters) -> list[Row]:
    """Apply inclusive time window, symbol substring and type selection filters."""
    low = _filter_bound(filters.t0, -math.inf)
    high = _filter_bound(filters.t1, math.inf)
    symbol = filters.symbol.strip().upper()
    filtered = []
    for row in rows:
        if not low <= row.ts <= high:
            continue
        if symbol and symbol not in row.symbol.upper():
            continue
        if filters.types and row.type_key not in filters.types:
            continue
        filtered.append(row)
    return filtered


def detected_types(rows: Iterable[Row]) -> list[str]:
    """Return sorted distinct type keys."""
    return sorted({row.type_key for row in rows})


def type_counts(rows: Iterable[Row]) -> dict[str, int]:
    """Count rows per type key."""
    counts: dict[str, int] = {}
    for row in rows:
        counts[row.type_key] = counts.get(row.type_key, 0) + 1
    return counts


def humanize_type(type_name: str) -> str:
    """Turn 'REALIZED_PNL' into 'REALIZED PNL' and capitalize lowercase word starts."""
    return re.sub(r"\b([a-z])", lambda match: match.group(1).upper(), type_name.replace("_", " "))
