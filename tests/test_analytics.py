"""Tests for dataframe-backed analytics over parsed rows."""

from unittest import TestCase

from conftest import make_row

from balance_log_analyzer.analytics import (
    AssetStats,
    Kpis,
    asset_net_bars,
    asset_stats,
    compute_kpis,
    daily_net_series,
    rows_to_dataframe,
    symbol_block_text,
    symbol_breakdown,
)
from balance_log_analyzer.config import Totals


class TestSeries(TestCase):
    """Test daily and per-asset series."""

    def test_rows_to_dataframe_keeps_row_fields(self) -> None:
        """Dataframe should have one row per parsed row and one column per field."""
        df = rows_to_dataframe([make_row("USDT", "TRANSFER", 1), make_row("BTC", "TRANSFER", 2)])
        self.assertEqual(len(df), 2)
        self.assertEqual(
            list(df.columns),
            ["id", "uid", "asset", "type", "amount", "time", "ts", "symbol", "extra", "raw"],
        )

    def test_daily_net_series_is_cumulative(self) -> None:
        """Daily net should accumulate in ascending day order."""
        rows = [
            make_row("USDT", "TRANSFER", 10, "2023-01-02 08:00:00"),
            make_row("USDT", "REALIZED_PNL", 5, "2023-01-01 08:00:00"),
            make_row("USDT", "COMMISSION", -2, "2023-01-01 09:00:00"),
        ]
        self.assertEqual(daily_net_series(rows), [("2023-01-01", 3.0), ("2023-01-02", 13.0)])

    def test_asset_net_bars_ordered_by_magnitude(self) -> None:
        """Assets should be ordered by absolute net and limited in count."""
        rows = [
            make_row("USDT", "TRANSFER", 5),
            make_row("BTC", "TRANSFER", -10),
            make_row("ETH", "TRANSFER", 1),
            make_row("USDT", "TRANSFER", 2),
        ]
        self.assertEqual(
            asset_net_bars(rows), [("BTC", -10.0), ("USDT", 7.0), ("ETH", 1.0)]
        )
        self.assertEqual(asset_net_bars(rows, limit=2), [("BTC", -10.0), ("USDT", 7.0)])

    def test_empty_rows_give_empty_series(self) -> None:
        """No rows should yield no points."""
        self.assertEqual(daily_net_series([]), [])
        self.assertEqual(asset_net_bars([]), [])


class TestSymbolBreakdown(TestCase):
    """Test per-symbol blocks."""

    def setUp(self) -> None:
        self.rows = [
            make_row("USDT", "REALIZED_PNL", 5, symbol="BTCUSDT"),
            make_row("USDT", "COMMISSION", -1, symbol="BTCUSDT"),
            make_row("USDT", "INSURANCE_CLEAR", -0.25, symbol="ADMIN_CLEARING"),
            make_row("USDT", "TRANSFER", 100, symbol="ETHUSDT"),
            make_row("USDT", "REALIZED_PNL", 3),
        ]

    def test_blocks_sorted_and_without_empty_symbols(self) -> None:
        """Only symbols with tracked activity should produce blocks, sorted by symbol."""
        blocks = symbol_breakdown(self.rows)
        self.assertEqual([block.symbol for block in blocks], ["ADMIN_CLEARING", "BTCUSDT"])
        self.assertEqual(blocks[0].display_symbol, "Insurance Fund Clearance")
        self.assertEqual(blocks[0].insurance, {"USDT": Totals(pos=0, neg=0.25, net=-0.25)})
        self.assertEqual(blocks[1].realized, {"USDT": Totals(pos=5, neg=0, net=5)})
        self.assertEqual(blocks[1].funding, {})

    def test_final_net_sums_sections(self) -> None:
        """Final net should add realized PnL and fees per asset."""
        block = symbol_breakdown(self.rows)[1]
        self.assertEqual(block.final_net(), {"USDT": 4.0})

    def test_block_text(self) -> None:
        """Text rendering should list non-empty sections and the final net."""
        block = symbol_breakdown(self.rows)[1]
        self.assertEqual(
            symbol_block_text(block),
            "\n".join(
                [
                    "Symbol: BTCUSDT",
                    "  Realized PnL:",
                    "    • USDT  +5  = 5",
                    "  Trading Fees:",
                    "    • USDT  −1  = -1",
                    "  Final Net (All Fees):",
                    "    • USDT  = 4",
                ]
            ),
        )


class TestAssetStats(TestCase):
    """Test per-asset fee and PnL highlights."""

    def test_buckets_and_best_worst_days(self) -> None:
        """Stats should split fees by bucket and find best and worst PnL days."""
        rows = [
            make_row("USDT", "REALIZED_PNL", 10, "2023-01-01 08:00:00"),
            make_row("USDT", "REALIZED_PNL", -4, "2023-01-02 08:00:00"),
            make_row("USDT", "COMMISSION", -1, "2023-01-01 08:00:00"),
            make_row("USDT", "FUNDING_FEE", 0.5, "2023-01-01 08:00:00"),
            make_row("USDT", "INSURANCE_CLEAR", -0.25, "2023-01-02 08:00:00"),
            make_row("USDT", "TRANSFER", 1000, "2023-01-02 08:00:00"),
        ]
        [stats] = asset_stats(rows)
        self.assertEqual(stats.asset, "USDT")
        self.assertEqual(stats.commission, -1.0)
        self.assertEqual(stats.funding, 0.5)
        self.assertEqual(stats.other_fees, -0.25)
        self.assertEqual(stats.realized_pnl, 6.0)
        self.assertEqual(stats.net_pnl, 5.25)
        self.assertEqual(stats.best_day, ("2023-01-01", 10.0))
        self.assertEqual(stats.worst_day, ("2023-01-02", -4.0))

    def test_noise_assets_dropped_and_case_merged(self) -> None:
        """Assets below the noise threshold should be dropped and case variants merged."""
        rows = [
            make_row("DOGE", "COMMISSION", -0.001),
            make_row("btc", "REALIZED_PNL", 0.5),
            make_row("BTC", "REALIZED_PNL", 0.25),
            make_row("USDT", "REALIZED_PNL", -6),
            make_row("", "REALIZED_PNL", 99),
        ]
        stats = asset_stats(rows)
        self.assertEqual([item.asset for item in stats], ["USDT", "BTC"])
        self.assertEqual(stats[1].realized_pnl, 0.75)

    def test_asset_without_pnl_has_no_days(self) -> None:
        """Assets with fees but no realized PnL should have no best or worst day."""
        self.assertEqual(
            asset_stats([make_row("USDT", "COMMISSION", -2)]),
            [
                AssetStats(
                    asset="USDT",
                    commission=-2.0,
                    funding=0.0,
                    other_fees=0.0,
                    realized_pnl=0.0,
                    net_pnl=-2.0,
                )
            ],
        )

    def test_day_ties_resolve_to_first_logged_day(self) -> None:
        """Equal daily PnL should pick the day that appears first in the log."""
        rows = [
            make_row("USDT", "REALIZED_PNL", 3, "2023-01-05 08:00:00"),
            make_row("USDT", "REALIZED_PNL", 3, "2023-01-02 08:00:00"),
        ]
        [stats] = asset_stats(rows)
        self.assertEqual(stats.best_day, ("2023-01-05", 3.0))
        self.assertEqual(stats.worst_day, ("2023-01-05", 3.0))

    def test_no_rows(self) -> None:
        """No rows should give no stats."""
        self.assertEqual(asset_stats([]), [])


def test_compute_kpis() -> None:
    """KPIs should count all rows and describe the filtered subset."""
    all_rows = [
        make_row("USDT", "REALIZED_PNL", 1, symbol="BTCUSDT"),
        make_row("USDT", "COMMISSION", -1, symbol="BTCUSDT"),
        make_row("USDT", "TRANSFER", 1),
    ]
    assert compute_kpis(all_rows, all_rows[:2]) == Kpis(
        total_rows=3, filtered_rows=2, symbols=1, types_found=2
    )
