"""Core balance-log data models and constants shared by all components."""

import math
from collections.abc import Callable
from dataclasses import dataclass, field

PromptValidator = Callable[[str], bool | str]

EPS = 1e-12
DUST_THRESHOLD = 1e-7
FINAL_DUST_THRESHOLD = 1e-6
DUST_ASSETS = ("BFUSD", "FDUSD", "LDUSDT")
UNKNOWN_TYPE = "(unknown)"
MIN_COLUMNS = 6


class TYPE:
    """Known balance-log transaction types; unknown types pass through as plain strings."""

    TRANSFER = "TRANSFER"
    REALIZED_PNL = "REALIZED_PNL"
    FUNDING_FEE = "FUNDING_FEE"
    COMMISSION = "COMMISSION"
    INSURANCE_CLEAR = "INSURANCE_CLEAR"
    WELCOME_BONUS = "WELCOME_BONUS"
    REFERRAL_KICKBACK = "REFERRAL_KICKBACK"
    COMISSION_REBATE = "COMISSION_REBATE"
    CASH_COUPON = "CASH_COUPON"
    COIN_SWAP_DEPOSIT = "COIN_SWAP_DEPOSIT"
    COIN_SWAP_WITHDRAW = "COIN_SWAP_WITHDRAW"
    POSITION_LIMIT_INCREASE_FEE = "POSITION_LIMIT_INCREASE_FEE"
    POSITION_CLAIM_TRANSFER = "POSITION_CLAIM_TRANSFER"
    AUTO_EXCHANGE = "AUTO_EXCHANGE"
    DELIVERED_SETTELMENT = "DELIVERED_SETTELMENT"
    STRATEGY_UMFUTURES_TRANSFER = "STRATEGY_UMFUTURES_TRANSFER"
    FUTURES_PRESENT = "FUTURES_PRESENT"
    EVENT_CONTRACTS_ORDER = "EVENT_CONTRACTS_ORDER"
    EVENT_CONTRACTS_PAYOUT = "EVENT_CONTRACTS_PAYOUT"
    INTERNAL_COMMISSION = "INTERNAL_COMMISSION"
    INTERNAL_TRANSFER = "INTERNAL_TRANSFER"
    BFUSD_REWARD = "BFUSD_REWARD"
    INTERNAL_AGENT_REWARD = "INTERNAL_AGENT_REWARD"
    API_REBATE = "API_REBATE"
    CONTEST_REWARD = "CONTEST_REWARD"
    INTERNAL_CONTEST_REWARD = "INTERNAL_CONTEST_REWARD"
    CROSS_COLLATERAL_TRANSFER = "CROSS_COLLATERAL_TRANSFER"
    OPTIONS_PREMIUM_FEE = "OPTIONS_PREMIUM_FEE"
    OPTIONS_SETTLE_PROFIT = "OPTIONS_SETTLE_PROFIT"
    LIEN_CLAIM = "LIEN_CLAIM"
    INTERNAL_COMMISSION_REBATE = "INTERNAL_COMMISSION_REBATE"
    FEE_RETURN = "FEE_RETURN"
    FUTURES_PRESENT_SPONSOR_REFUND = "FUTURES_PRESENT_SPONSOR_REFUND"
    LIQUIDATION_FEE = "LIQUIDATION_FEE"
    TRADING_FEE = "TRADING_FEE"


@dataclass(frozen=True, slots=True)
class Row:
    """One parsed balance-log entry."""

    id: str
    uid: str
    asset: str
    type: str
    amount: float
    time: str = ""
    ts: float = math.nan
    symbol: str = ""
    extra: str = ""
    raw: str = ""

    @property
    def type_key(self) -> str:
        """Return grouping key, substituting the unknown marker for empty types."""
        return self.type or UNKNOWN_TYPE

    @property
    def has_valid_ts(self) -> bool:
        """Return whether the row carries a parsed UTC timestamp."""
        return not math.isnan(self.ts)


@dataclass(slots=True)
class Totals:
    """Running positive, negative and net accumulator for one bucket."""

    pos: float = 0.0
    neg: float = 0.0
    net: float = 0.0

    def add(self, amount: float) -> None:
        """Route one signed amount into the bucket."""
        if amount >= 0:
            self.pos += amount
        else:
            self.neg += abs(amount)
        self.net += amount

    def is_empty(self) -> bool:
        """Return whether all three accumulators are exactly zero."""
        return self.pos == 0 and self.neg == 0 and self.net == 0


TotalsMap = dict[str, Totals]
TotalsByType = dict[str, TotalsMap]


@dataclass(frozen=True, slots=True)
class SummaryRow:
    """Type/asset summary line derived from one totals bucket."""

    label: str
    asset: str
    in_: float = 0.0
    out: float = 0.0
    net: float = 0.0


@dataclass(frozen=True, slots=True)
class SwapLine:
    """One grouped swap event rendered as display text."""

    time: str
    ts: float
    text: str


@dataclass(frozen=True, slots=True)
class AnchorTransfer:
    """Single transfer applied at the audit anchor."""

    asset: str
    amount: float


@dataclass(frozen=True, slots=True)
class FinalBalance:
    """Expected closing balance for one asset."""

    asset: str
    amount: float


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """Parsed rows plus advisory and informational messages for the caller."""

    rows: list[Row] = field(default_factory=list)
    message: str = ""
    info: str = ""

    @property
    def ok(self) -> bool:
        """Return whether at least one row was parsed."""
        return bool(self.rows)


@dataclass(frozen=True, slots=True)
class RowFilters:
    """Caller-supplied row filters applied upstream of aggregation."""

    t0: str = ""
    t1: str = ""
    symbol: str = ""
    types: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class StoryInputs:
    """Caller-supplied audit and narrative inputs."""

    start: str = ""
    end: str = ""
    baseline_text: str = ""
    transfer_amount: str = ""
    transfer_asset: str = ""
    lang: str = "en"
