"""Tabular analytics over parsed rows: daily series, asset bars, symbol and asset stats."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields

import pandas as pd

from balance_log_analyzer.aggregation import sum_by_asset, totals_parts
from balance_log_analyzer.config import TYPE, Row, TotalsMap
from balance_log_analyzer.formatting import fmt

ASSET_BAR_LIMIT = 12
STAT_NOISE_THRESHOLD = 0.01
CLEARING_SYMBOLS = frozenset({"ADMIN_CLEARING", "CHAT_APPLY_CLEARING"})
CLEARING_DISPLAY_NAME = "Insurance Fund Clearance"

_ROW_COLUMNS = [f.name for f in fields(Row)]
_STAT_BUCKETS = {
    TYPE.COMMISSION: "commission",
    TYPE.TRADING_FEE: "commission",
    TYPE.FUNDING_FEE: "funding",
    TYPE.INSURANCE_CLEAR: "other_fees",
    TYPE.LIQUIDATION_FEE: "other_fees",
    TYPE.REALIZED_PNL: "realized_pnl",
}
_STAT_COLUMNS = ["commission", "funding", "other_fees", "realized_pnl"]


@dataclass(frozen=True, slots=True)
class SymbolBlock:
    """Per-symbol totals for PnL, funding, trading fees and insurance clearance."""

    symbol: str
    realized: TotalsMap
    funding: TotalsMap
    commission: TotalsMap
    insurance: TotalsMap

    @property
    def display_symbol(self) -> str:
        """Return symbol name shown to users."""
        return CLEARING_DISPLAY_NAME if self.symbol in CLEARING_SYMBOLS else self.symbol

    def sections(self) -> list[tuple[str, TotalsMap]]:
        """Return titled sections in display order."""
        return [
            ("Realized PnL", self.realized),
            ("Funding", self.funding),
            ("Trading Fees", self.commission),
            ("Insurance Clearance Fee", self.insurance),
        ]

    def final_net(self) -> dict[str, float]:
        """Return net across all sections per asset, sorted by asset."""
        finals: dict[str, float] = {}
        for _, totals in self.sections():
            for asset, bucket in totals.items():
                finals[asset] = finals.get(asset, 0.0) + bucket.net
        return dict(sorted(finals.items()))


@dataclass(frozen=True, slots=True)
class AssetStats:
    """Per-asset fee and PnL highlights."""

    asset: str
    commission: float
    funding: float
    other_fees: float
    realized_pnl: float
    net_pnl: float
    best_day: tuple[str, float] | None = None
    worst_day: tuple[str, float] | None = None


@dataclass(frozen=True, slots=True)
class Kpis:
    """Headline counters for the loaded and filtered rows."""

    total_rows: int
    filtered_rows: int
    symbols: int
    types_found: int


def rows_to_dataframe(rows: Iterable[Row]) -> pd.DataFrame:
    """Return one dataframe row per parsed row, keeping all row fields as columns."""
    return pd.DataFrame([asdict(row) for row in rows], columns=_ROW_COLUMNS)


def _with_day(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["day"] = df["time"].str.split(" ").str[0]
    return df


def daily_net_series(rows: Iterable[Row]) -> list[tuple[str, float]]:
    """Return cumulative net amount per day, days in ascending order."""
    df = rows_to_dataframe(rows)
    if df.empty:
        return []
    daily = _with_day(df).groupby("day", sort=True)["amount"].sum().cumsum()
    return [(str(day), float(value)) for day, value in daily.items()]


def asset_net_bars(rows: Iterable[Row], limit: int = ASSET_BAR_LIMIT) -> list[tuple[str, float]]:
    """Return net per asset ordered by magnitude, largest first."""
    df = rows_to_dataframe(rows)
    if df.empty:
        return []
    net = df.groupby("asset", sort=False)["amount"].sum()
    order = net.abs().sort_values(ascending=False, kind="stable").index
    return [(str(asset), float(value)) for asset, value in net.reindex(order).head(limit).items()]


def _pruned(totals: TotalsMap) -> TotalsMap:
    return {asset: bucket for asset, bucket in totals.items() if not bucket.is_empty()}


def symbol_breakdown(rows: Iterable[Row]) -> list[SymbolBlock]:
    """Group PnL, funding, commission and insurance totals per non-empty symbol."""
    by_symbol: dict[str, list[Row]] = {}
    for row in rows:
        if row.symbol:
            by_symbol.setdefault(row.symbol, []).append(row)
    blocks = []
    for symbol, symbol_rows in by_symbol.items():
        block = SymbolBlock(
            symbol=symbol,
            realized=_pruned(sum_by_asset(r for r in symbol_rows if r.type == TYPE.REALIZED_PNL)),
            funding=_pruned(sum_by_asset(r for r in symbol_rows if r.type == TYPE.FUNDING_FEE)),
            commission=_pruned(sum_by_asset(r for r in symbol_rows if r.type == TYPE.COMMISSION)),
            insurance=_pruned(
                sum_by_asset(
                    r
                    for r in symbol_rows
                    if r.type in (TYPE.INSURANCE_CLEAR, TYPE.LIQUIDATION_FEE)
                )
            ),
        )
        if any(totals for _, totals in block.sections()):
            blocks.append(block)
    return sorted(blocks, key=lambda block: block.symbol)


def symbol_block_text(block: SymbolBlock) -> str:
    """Render one symbol block as plain text for copying."""
    lines = [f"Symbol: {block.display_symbol}"]
    for title, totals in block.sections():
        if not totals:
            continue
        lines.append(f"  {title}:")
        for asset in sorted(totals):
            lines.append(f"    • {asset}  {totals_parts(totals[asset])}")
    if finals := block.final_net():
        lines.append("  Final Net (All Fees):")
        lines += [f"    • {asset}  = {fmt(net)}" for asset, net in finals.items()]
    return "\n".join(lines)


def asset_stats(rows: Iterable[Row]) -> list[AssetStats]:
    """Return per-asset fee and PnL highlights, largest realized PnL first."""
    df = rows_to_dataframe(rows)
    if df.empty:
        return []
    df = df[df["asset"] != ""].copy()
    df["asset"] = df["asset"].str.upper()
    df["bucket"] = df["type"].map(_STAT_BUCKETS)
    df = df.dropna(subset=["bucket"])
    if df.empty:
        return []
    totals = (
        df.pivot_table(index="asset", columns="bucket", values="amount", aggfunc="sum", sort=False)
        .reindex(columns=_STAT_COLUMNS)
        .fillna(0.0)
    )
    pnl = _with_day(df[df["bucket"] == "realized_pnl"])
    pnl = pnl[pnl["day"] != ""]
    daily = {
        asset: group.groupby("day", sort=False)["amount"].sum()
        for asset, group in pnl.groupby("asset", sort=False)
    }

    stats = []
    for asset, values in totals.iterrows():
        commission, funding, other_fees, realized = (float(values[c]) for c in _STAT_COLUMNS)
        if all(abs(v) < STAT_NOISE_THRESHOLD for v in (commission, funding, realized)):
            continue
        best_day = worst_day = None
        if (days := daily.get(asset)) is not None:
            best_day = (str(days.idxmax()), float(days.max()))
            worst_day = (str(days.idxmin()), float(days.min()))
        stats.append(
            AssetStats(
                asset=str(asset),
                commission=commission,
                funding=funding,
                other_fees=other_fees,
                realized_pnl=realized,
                net_pnl=realized + commission + funding + other_fees,
                best_day=best_day,
                worst_day=worst_day,
            )
        )
    return sorted(stats, key=lambda item: abs(item.realized_pnl), reverse=True)


def compute_kpis(all_rows: Iterable[Row], filtered_rows: Iterable[Row]) -> Kpis:
    """Count loaded rows, filtered rows, distinct symbols and distinct types."""
    all_rows, filtered_rows = list(all_rows), list(filtered_rows)
    return Kpis(
        total_rows=len(all_rows),
        filtered_rows=len(filtered_rows),
        symbols=len({row.symbol for row in filtered_rows if row.symbol}),
        types_found=len({row.type_key for row in filtered_rows}),
    )
