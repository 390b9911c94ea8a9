"""Tests for swap grouping and event-contract totals."""

from unittest import TestCase

from conftest import make_row

from balance_log_analyzer.config import SwapLine, Totals
from balance_log_analyzer.swaps import event_totals, group_swaps, split_swap_text, swap_group_key


class TestGroupSwaps(TestCase):
    """Test collapsing of swap legs into directional lines."""

    def test_pairs_legs_into_one_line(self) -> None:
        """Withdraw and deposit legs sharing time and extra prefix should form one line."""
        rows = [
            make_row("BTC", "COIN_SWAP_WITHDRAW", -1, extra="swap1@a"),
            make_row("USDT", "COIN_SWAP_DEPOSIT", 100, extra="swap1@b"),
        ]
        [line] = group_swaps(rows, "COIN_SWAP")
        self.assertEqual(line.time, "2023-01-01 12:00:00")
        self.assertEqual(line.text, "2023-01-01 12:00:00 — Out: −1 BTC  →  In: +100 USDT")

    def test_legs_with_different_keys_stay_apart(self) -> None:
        """Legs at different times should produce separate one-sided lines."""
        rows = [
            make_row("BTC", "COIN_SWAP_WITHDRAW", -1, time="2023-01-01 12:00:00"),
            make_row("USDT", "COIN_SWAP_DEPOSIT", 100, time="2023-01-01 12:00:01"),
        ]
        texts = [line.text for line in group_swaps(rows, "COIN_SWAP")]
        self.assertEqual(
            texts,
            [
                "2023-01-01 12:00:00 — Out: −1 BTC",
                "2023-01-01 12:00:01 — In: +100 USDT",
            ],
        )

    def test_group_netting_to_zero_is_dropped(self) -> None:
        """Groups whose assets all net to zero should not produce lines."""
        rows = [
            make_row("BTC", "COIN_SWAP_WITHDRAW", -1),
            make_row("BTC", "COIN_SWAP_DEPOSIT", 1),
        ]
        self.assertEqual(group_swaps(rows, "COIN_SWAP"), [])

    def test_auto_exchange_matches_exact_type(self) -> None:
        """Auto-exchange grouping should ignore coin swaps and lookalike types."""
        rows = [
            make_row("BNB", "AUTO_EXCHANGE", -0.1),
            make_row("USDT", "AUTO_EXCHANGE", 30),
            make_row("BTC", "COIN_SWAP_WITHDRAW", -1),
            make_row("ETH", "AUTO_EXCHANGE_FEE", -1),
        ]
        [line] = group_swaps(rows, "AUTO_EXCHANGE")
        self.assertEqual(line.text, "2023-01-01 12:00:00 — Out: −0.1 BNB  →  In: +30 USDT")

    def test_lines_sorted_oldest_first_with_missing_time_last(self) -> None:
        """Lines should be ordered by timestamp and rows without one go last."""
        rows = [
            make_row("USDT", "COIN_SWAP_DEPOSIT", 1, time=""),
            make_row("USDT", "COIN_SWAP_DEPOSIT", 2, time="2023-01-02 00:00:00"),
            make_row("USDT", "COIN_SWAP_DEPOSIT", 3, time="2023-01-01 00:00:00"),
        ]
        texts = [line.text for line in group_swaps(rows, "COIN_SWAP")]
        self.assertEqual(
            texts,
            [
                "2023-01-01 00:00:00 — In: +3 USDT",
                "2023-01-02 00:00:00 — In: +2 USDT",
                " — In: +1 USDT",
            ],
        )

    def test_unsupported_kind_raises(self) -> None:
        """Unknown swap kind should raise ValueError."""
        with self.assertRaises(ValueError):
            group_swaps([], "SPOT")


def test_swap_group_key_uses_extra_before_at_sign() -> None:
    """Group key should join time with the extra text before '@'."""
    row = make_row("BTC", "COIN_SWAP_WITHDRAW", -1, extra="abc@def")
    assert swap_group_key(row) == "2023-01-01 12:00:00|abc"


def test_event_totals_split_orders_and_payouts() -> None:
    """Event totals should fold orders and payouts separately by asset."""
    orders, payouts = event_totals(
        [
            make_row("USDT", "EVENT_CONTRACTS_ORDER", -10),
            make_row("USDT", "EVENT_CONTRACTS_ORDER", -5),
            make_row("USDT", "EVENT_CONTRACTS_PAYOUT", 20),
            make_row("USDT", "TRANSFER", 99),
        ]
    )
    assert orders == {"USDT": Totals(pos=0, neg=15, net=-15)}
    assert payouts == {"USDT": Totals(pos=20, neg=0, net=20)}


def test_split_swap_text_into_columns() -> None:
    """Swap text should split into date, outflow and inflow columns."""
    line = SwapLine(
        time="2023-01-01 12:00:00",
        ts=0.0,
        text="2023-01-01 12:00:00 — Out: −1 BTC  →  In: +100 USDT",
    )
    assert split_swap_text(line) == ("2023-01-01 12:00:00", "−1 BTC", "+100 USDT")


def test_split_swap_text_with_one_side() -> None:
    """Missing side should render as an empty column."""
    line = SwapLine(time="2023-01-01 12:00:00", ts=0.0, text="2023-01-01 12:00:00 — In: +5 USDT")
    assert split_swap_text(line) == ("2023-01-01 12:00:00", "", "+5 USDT")
