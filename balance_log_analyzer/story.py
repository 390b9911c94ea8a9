"""Audit and narrative orchestration over one set of caller inputs."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from balance_log_analyzer.aggregation import build_summary_rows
from balance_log_analyzer.audit import (
    build_audit,
    final_balances_for_window,
    parse_baseline,
    parse_transfer,
)
from balance_log_analyzer.config import FinalBalance, Row, StoryInputs, SummaryRow
from balance_log_analyzer.errors import BalanceLogError
from balance_log_analyzer.logging_setup import get_logger
from balance_log_analyzer.narrative import (
    NarrativeGroups,
    build_narrative_groups,
    compose_narrative,
)
from balance_log_analyzer.parser import parse_utc

_logger = get_logger("balance_log_analyzer.story")

MISSING_START_MESSAGE = "Set a Start time (UTC+0) to run the audit."

AUDIT_EXCEPTIONS = (
    BalanceLogError,
    ArithmeticError,
    LookupError,
    TypeError,
    ValueError,
)


@dataclass(frozen=True, slots=True)
class AuditOutcome:
    """Audit text plus the final balances it reports."""

    text: str
    final_balances: list[FinalBalance] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Story:
    """Everything rendered on the story screen for one set of inputs."""

    audit: AuditOutcome
    narrative: str
    summary_rows: list[SummaryRow]
    groups: NarrativeGroups
    final_balances: list[FinalBalance]


def _safe_baseline(text: str) -> dict[str, float] | None:
    """Parse baseline for narrative display, ignoring malformed input."""
    try:
        return parse_baseline(text)
    except BalanceLogError:
        return None


def run_audit(rows: Iterable[Row], inputs: StoryInputs) -> AuditOutcome:
    """Build audit for caller inputs, turning missing start and failures into messages."""
    anchor_ts = parse_utc(inputs.start) if inputs.start else None
    if not anchor_ts:
        return AuditOutcome(text=MISSING_START_MESSAGE)
    end_ts = parse_utc(inputs.end) if inputs.end else None
    rows = list(rows)
    try:
        baseline = parse_baseline(inputs.baseline_text)
        transfer = parse_transfer(inputs.transfer_amount, inputs.transfer_asset)
        text = build_audit(rows, anchor_ts, end_ts, baseline, transfer)
        final_balances = final_balances_for_window(rows, anchor_ts, end_ts, baseline, transfer)
    except AUDIT_EXCEPTIONS as error:
        _logger.warning("Audit failed: %s", error)
        return AuditOutcome(text=f"Audit failed: {error}")
    return AuditOutcome(text=text, final_balances=final_balances)


def build_story(rows: Iterable[Row], inputs: StoryInputs) -> Story:
    """Build audit, summary and localized narrative sharing the same final balances."""
    rows = list(rows)
    audit = run_audit(rows, inputs)
    summary_rows = build_summary_rows(rows)
    groups = build_narrative_groups(summary_rows, inputs.lang)
    start_ts = parse_utc(inputs.start) if inputs.start else None
    narrative = compose_narrative(
        inputs.lang,
        groups,
        audit.final_balances,
        start_ts=start_ts,
        baseline=_safe_baseline(inputs.baseline_text),
        transfer=parse_transfer(inputs.transfer_amount, inputs.transfer_asset),
    )
    return Story(
        audit=audit,
        narrative=narrative,
        summary_rows=summary_rows,
        groups=groups,
        final_balances=audit.final_balances,
    )
