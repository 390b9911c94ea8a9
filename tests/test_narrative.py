"""Tests for localized narrative grouping and composition."""

from unittest import TestCase

from balance_log_analyzer.config import AnchorTransfer, FinalBalance, SummaryRow
from balance_log_analyzer.narrative import build_narrative_groups, compose_narrative
from balance_log_analyzer.parser import parse_utc

START = parse_utc("2023-01-01 12:00:00")
SUMMARY = [
    SummaryRow(label="COIN_SWAP_DEPOSIT", asset="USDT", in_=100.0, net=100.0),
    SummaryRow(label="COIN_SWAP_WITHDRAW", asset="BTC", out=1.0, net=-1.0),
    SummaryRow(label="FUNDING_FEE", asset="USDT", in_=2.0, out=0.5, net=1.5),
    SummaryRow(label="REALIZED_PNL", asset="usdt", in_=5.0, out=2.0, net=3.0),
]


class TestBuildNarrativeGroups(TestCase):
    """Test merging summary rows into labeled flows."""

    def test_swap_legs_merge_under_one_label(self) -> None:
        """Both coin-swap types should land in the same localized group."""
        groups = build_narrative_groups(SUMMARY, "en")
        self.assertEqual(
            groups["Coin Swaps"],
            {"USDT": {"in": 100.0, "out": 0.0}, "BTC": {"in": 0.0, "out": 1.0}},
        )

    def test_assets_are_uppercased_and_summed(self) -> None:
        """Lowercase assets should merge into their uppercase key."""
        rows = [
            SummaryRow(label="TRANSFER", asset="usdt", in_=1.0),
            SummaryRow(label="TRANSFER", asset="USDT", in_=2.0, out=0.5),
        ]
        groups = build_narrative_groups(rows, "en")
        self.assertEqual(groups, {"Transfers": {"USDT": {"in": 3.0, "out": 0.5}}})

    def test_labels_follow_language(self) -> None:
        """Group keys should be localized labels."""
        groups = build_narrative_groups(SUMMARY, "tr")
        self.assertEqual(
            set(groups), {"Coin Takasları", "Fonlama Ücretleri", "Gerçekleşen K/Z"}
        )


class TestComposeNarrative(TestCase):
    """Test narrative text layout."""

    def test_full_english_narrative(self) -> None:
        """Narrative should list zone, baseline, start, sorted groups and final balances."""
        narrative = compose_narrative(
            "en",
            build_narrative_groups(SUMMARY, "en"),
            [FinalBalance("BTC", 11.0), FinalBalance("BFUSD", 5e-7)],
            start_ts=START,
            baseline={"USDT": 50.0, "BTC": 10.0},
            transfer=AnchorTransfer("USDT", 100.0),
        )
        self.assertEqual(
            narrative,
            "\n".join(
                [
                    "All times are shown in UTC+0.",
                    "",
                    "Initial balances: BTC 10  •  USDT 50",
                    "",
                    "2023-01-01 12:00:00 UTC+0 - you transferred 100 USDT into your Futures "
                    "wallet. Your USDT balance changed from 50 to 150.",
                    "",
                    "After that, the following activity took place:",
                    "",
                    "Coin Swaps",
                    "  • Out:  BTC -1",
                    "  • In:   USDT +100",
                    "",
                    "Funding Fees",
                    "  • Received: USDT +2",
                    "  • Paid: USDT -0.5",
                    "",
                    "Realized PnL",
                    "  • USDT: +5, -2",
                    "",
                    "—",
                    "Final expected balances:",
                    "  • BTC 11",
                    "  • BFUSD 0.0000",
                ]
            ),
        )

    def test_minimal_narrative(self) -> None:
        """Without start, baseline or balances only the frame should remain."""
        narrative = compose_narrative("en", {}, [])
        self.assertEqual(
            narrative,
            "All times are shown in UTC+0.\n\n\n"
            "After that, the following activity took place:\n\n—",
        )

    def test_start_time_shifted_to_language_zone(self) -> None:
        """Start line should use the language's offset and zone label."""
        narrative = compose_narrative("ko", {}, [], start_ts=START)
        self.assertIn("2023-01-01 21:00:00 UTC+9 - 여기서 활동이 시작됩니다.", narrative)
        self.assertTrue(narrative.startswith("모든 시간은 UTC+9"))

    def test_localized_transfer_with_baseline(self) -> None:
        """Transfer sentence and balance change should be localized."""
        narrative = compose_narrative(
            "tr",
            {},
            [],
            start_ts=START,
            baseline={"USDT": 50.0},
            transfer=AnchorTransfer("USDT", 100.0),
        )
        self.assertIn(
            "2023-01-01 15:00:00 UTC+3 - Futures cüzdanınıza 100 USDT transfer ettiniz. "
            "USDT bakiyeniz 50 değerinden 150 değerine değişti.",
            narrative,
        )

    def test_outgoing_transfer_without_baseline(self) -> None:
        """Negative transfer should use the outgoing sentence and generic balance note."""
        narrative = compose_narrative(
            "en", {}, [], start_ts=START, transfer=AnchorTransfer("USDT", -20.0)
        )
        self.assertIn(
            "2023-01-01 12:00:00 UTC+0 - you transferred -20 USDT out of your Futures wallet. "
            "Your balance changed accordingly.",
            narrative,
        )

    def test_transfer_ignored_without_start(self) -> None:
        """Start line should be omitted entirely when no start time is given."""
        narrative = compose_narrative("en", {}, [], transfer=AnchorTransfer("USDT", 5.0))
        self.assertNotIn("transferred", narrative)

    def test_unknown_language_uses_english(self) -> None:
        """Unsupported languages should render the English narrative."""
        self.assertEqual(compose_narrative("xx", {}, []), compose_narrative("en", {}, []))
