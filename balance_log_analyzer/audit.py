"""Baseline reconciliation audit and the input parsers it depends on."""

import math
import re
from collections.abc import Iterable

from balance_log_analyzer.aggregation import totals_by_type
from balance_log_analyzer.config import (
    DUST_ASSETS,
    DUST_THRESHOLD,
    AnchorTransfer,
    FinalBalance,
    Row,
    TotalsByType,
)
from balance_log_analyzer.errors import BaselineParseError
from balance_log_analyzer.formatting import fmt, fmt_signed, format_time, non_zero
from balance_log_analyzer.parser import parse_amount

_AMOUNT_PATTERN = r"(-?\d+(?:\.\d+)?(?:e[+\-]?\d+)?)"
_ASSET_FIRST_RE = re.compile(rf"^([A-Z0-9_]+)\s+{_AMOUNT_PATTERN}$", re.IGNORECASE | re.ASCII)
_AMOUNT_FIRST_RE = re.compile(rf"^{_AMOUNT_PATTERN}\s+([A-Z0-9_]+)$", re.IGNORECASE | re.ASCII)
_LINE_BREAK_RE = re.compile(r"\r?\n")


def parse_baseline(text: str) -> dict[str, float] | None:
    """Parse 'ASSET amount' or 'amount ASSET' lines; None when text is blank."""
    lines = [line.strip() for line in _LINE_BREAK_RE.split(text)]
    lines = [line for line in lines if line]
    if not lines:
        return None
    baseline: dict[str, float] = {}
    for line in lines:
        if match := _ASSET_FIRST_RE.match(line):
            asset, amount = match.group(1), match.group(2)
        elif match := _AMOUNT_FIRST_RE.match(line):
            amount, asset = match.group(1), match.group(2)
        else:
            raise BaselineParseError(line)
        asset = asset.upper()
        baseline[asset] = baseline.get(asset, 0.0) + float(amount)
    return baseline


def parse_transfer(amount_text: str, asset_text: str) -> AnchorTransfer | None:
    """Build anchor transfer from raw inputs; None when asset or amount is unusable."""
    asset = (asset_text or "").strip().upper()
    amount = parse_amount(amount_text or "")
    if not asset or amount is None:
        return None
    return AnchorTransfer(asset=asset, amount=amount)


def select_window(rows: Iterable[Row], anchor_ts: float, end_ts: float | None = None) -> list[Row]:
    """Return rows at or after the anchor (and at or before the end), oldest first."""
    selected = [
        row for row in rows if row.ts >= anchor_ts and (not end_ts or row.ts <= end_ts)
    ]
    return sorted(selected, key=lambda row: row.ts)


def net_effect_by_asset(totals: TotalsByType) -> dict[str, float]:
    """Sum net across all types for each uppercased asset."""
    net_effect: dict[str, float] = {}
    for by_asset in totals.values():
        for asset, bucket in by_asset.items():
            key = asset.upper()
            net_effect[key] = net_effect.get(key, 0.0) + bucket.net
    return net_effect


def compute_final_balances(
    net_effect: dict[str, float],
    baseline: dict[str, float] | None,
    anchor_transfer: AnchorTransfer | None = None,
) -> list[FinalBalance]:
    """Reconcile baseline + anchor transfer + net activity into sorted final balances."""
    if not baseline:
        return []
    final: dict[str, float] = {}
    for asset, amount in baseline.items():
        final[asset.upper()] = final.get(asset.upper(), 0.0) + amount
    if anchor_transfer is not None:
        asset = anchor_transfer.asset.upper()
        final[asset] = final.get(asset, 0.0) + anchor_transfer.amount
    for asset, net in net_effect.items():
        final[asset.upper()] = final.get(asset.upper(), 0.0) + net
    for dust in DUST_ASSETS:
        if abs(final.get(dust, 0.0)) < DUST_THRESHOLD:
            final.pop(dust, None)
    return [
        FinalBalance(asset=asset, amount=final[asset])
        for asset in sorted(final)
        if non_zero(final[asset])
    ]


def _activity_lines(totals: TotalsByType) -> list[str]:
    """Render per-type per-asset activity, skipping buckets with no visible segment."""
    lines = []
    for type_key in sorted(totals):
        items = []
        for asset, bucket in totals[type_key].items():
            segments = []
            if non_zero(bucket.pos):
                segments.append(f"+{fmt(bucket.pos)}")
            if non_zero(bucket.neg):
                segments.append(f"-{fmt(bucket.neg)}")
            if not segments:
                continue
            segments.append(f"= {fmt(bucket.net)}")
            items.append(f"{asset}  {' / '.join(segments)}")
        if items:
            lines.append(f"• {type_key}: {'  •  '.join(items)}")
    return lines or ["  • No activity."]


def build_audit(
    rows: Iterable[Row],
    anchor_ts: float,
    end_ts: float | None = None,
    baseline: dict[str, float] | None = None,
    anchor_transfer: AnchorTransfer | None = None,
) -> str:
    """Build plain-text balance audit for activity after the anchor."""
    if anchor_ts is None or math.isnan(anchor_ts):
        raise ValueError("Audit anchor timestamp is required.")
    totals = totals_by_type(select_window(rows, anchor_ts, end_ts))
    header = f"Anchor (UTC+0): {format_time(anchor_ts)}"
    if end_ts:
        header += f"  →  End: {format_time(end_ts)}"
    lines = ["Agent Balance Audit", header]

    if baseline:
        shown = "  •  ".join(f"{asset} {fmt(amount)}" for asset, amount in baseline.items())
        lines += ["", "Baseline (before anchor):", f"  • {shown}"]
    else:
        lines += ["", "Baseline: not provided (rolling from zero)."]
    if anchor_transfer is not None:
        transfer = f"{fmt_signed(anchor_transfer.amount)} {anchor_transfer.asset}"
        lines += ["", f"Applied anchor transfer: {transfer}"]

    lines += ["", "Activity after anchor:", *_activity_lines(totals)]

    net_effect = net_effect_by_asset(totals)
    net_lines = [
        f"  • {asset}  {fmt_signed(net)}" for asset, net in net_effect.items() if non_zero(net)
    ]
    lines += ["", "Net effect (after anchor):", *(net_lines or ["  • 0"])]

    final_balances = compute_final_balances(net_effect, baseline, anchor_transfer)
    if final_balances:
        lines += ["", "Final expected balances:"]
        lines += [f"  • {balance.asset}  {fmt(balance.amount)}" for balance in final_balances]
    return "\n".join(lines)


def final_balances_for_window(
    rows: Iterable[Row],
    anchor_ts: float,
    end_ts: float | None = None,
    baseline: dict[str, float] | None = None,
    anchor_transfer: AnchorTransfer | None = None,
) -> list[FinalBalance]:
    """Return the final balances reported by the audit for the same inputs."""
    totals = totals_by_type(select_window(rows, anchor_ts, end_ts))
    return compute_final_balances(net_effect_by_asset(totals), baseline, anchor_transfer)
