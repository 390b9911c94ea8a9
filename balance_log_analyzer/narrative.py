"""Localized prose summary of balance-log activity."""

from collections.abc import Iterable

from balance_log_analyzer.config import AnchorTransfer, FinalBalance, SummaryRow
from balance_log_analyzer.formatting import fmt_final, fmt_trim, format_time
from balance_log_analyzer.i18n import (
    AUTO_EXCHANGE_MIX,
    COIN_SWAP_MIX,
    Locales,
    friendly_label,
    render,
)

NarrativeGroups = dict[str, dict[str, dict[str, float]]]


def build_narrative_groups(summary_rows: Iterable[SummaryRow], lang: str) -> NarrativeGroups:
    """Merge summary rows into in/out flows keyed by localized label and asset."""
    groups: NarrativeGroups = {}
    for row in summary_rows:
        by_asset = groups.setdefault(friendly_label(row.label, lang), {})
        flow = by_asset.setdefault(row.asset.upper(), {"in": 0.0, "out": 0.0})
        flow["in"] += row.in_ or 0.0
        flow["out"] += row.out or 0.0
    return groups


def _start_lines(
    texts: dict[str, str],
    start: str,
    baseline: dict[str, float] | None,
    transfer: AnchorTransfer | None,
) -> list[str]:
    if not start:
        return []
    if transfer is None:
        return ["", f"{start} - {texts['startLineNoTransfer']}"]
    key = "transferSentenceTo" if transfer.amount >= 0 else "transferSentenceFrom"
    line = f"{start} - {render(texts[key], AMOUNT=fmt_trim(transfer.amount), ASSET=transfer.asset)}"
    before = (baseline or {}).get(transfer.asset)
    if before is not None:
        change = render(
            texts["changedFromTo"],
            BEFORE=fmt_trim(before),
            AFTER=fmt_trim(before + transfer.amount),
            ASSET=transfer.asset,
        )
        line += f" {change}"
    else:
        line += f" {texts['balanceChanged']}"
    return ["", line]


def _group_lines(
    texts: dict[str, str],
    label: str,
    by_asset: dict[str, dict[str, float]],
) -> list[str]:
    """Render one label block; swap and funding groups split their legs by direction."""
    lines = [label]
    assets = sorted(by_asset)
    if label in (texts[COIN_SWAP_MIX], texts[AUTO_EXCHANGE_MIX]):
        outs = [f"{a} -{fmt_trim(by_asset[a]['out'])}" for a in assets if by_asset[a]["out"] > 0]
        ins = [f"{a} +{fmt_trim(by_asset[a]['in'])}" for a in assets if by_asset[a]["in"] > 0]
        if outs:
            lines.append(f"  • {texts['out']}:  {', '.join(outs)}")
        if ins:
            lines.append(f"  • {texts['in']}:   {', '.join(ins)}")
    elif label == texts["FUNDING_FEE"]:
        received = [f"{a} +{fmt_trim(by_asset[a]['in'])}" for a in assets if by_asset[a]["in"] > 0]
        paid = [f"{a} -{fmt_trim(by_asset[a]['out'])}" for a in assets if by_asset[a]["out"] > 0]
        if received:
            lines.append(f"  • {texts['fundingFeesReceived']}: {', '.join(received)}")
        if paid:
            lines.append(f"  • {texts['fundingFeesPaid']}: {', '.join(paid)}")
    else:
        for asset in assets:
            flow = by_asset[asset]
            parts = []
            if flow["in"] != 0:
                parts.append(f"+{fmt_trim(flow['in'])}")
            if flow["out"] != 0:
                parts.append(f"-{fmt_trim(flow['out'])}")
            if parts:
                lines.append(f"  • {asset}: {', '.join(parts)}")
    lines.append("")
    return lines


def compose_narrative(
    lang: str,
    groups: NarrativeGroups,
    final_balances: Iterable[FinalBalance],
    start_ts: float | None = None,
    baseline: dict[str, float] | None = None,
    transfer: AnchorTransfer | None = None,
) -> str:
    """Compose localized narrative text with zone-shifted times and final balances."""
    texts = Locales.texts(lang)
    config = Locales.config(lang)
    lines = [render(texts["timesNote"], ZONE=config.label), ""]

    if baseline:
        items = "  •  ".join(f"{asset} {fmt_trim(baseline[asset])}" for asset in sorted(baseline))
        lines.append(f"{texts['initialBalancesIntro']} {items}")

    start = f"{format_time(start_ts, config.offset)} {config.label}" if start_ts else ""
    lines += _start_lines(texts, start, baseline, transfer)
    lines += ["", texts["afterStart"], ""]

    for label in sorted(groups):
        lines += _group_lines(texts, label, groups[label])

    lines.append("—")
    final_balances = list(final_balances)
    if final_balances:
        lines.append(texts["finalIntro"])
        lines += [
            f"  • {balance.asset} {fmt_final(balance.amount)}" for balance in final_balances
        ]
    return "\n".join(lines)
