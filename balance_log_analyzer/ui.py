"""UI helpers for questionary prompts and terminal interaction."""

import sys
import traceback
from pathlib import Path
from typing import Any, Callable, Literal, cast

import questionary
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_bindings import merge_key_bindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.shortcuts import clear as prompt_toolkit_clear
from questionary.prompts.path import GreatUXPathCompleter
from questionary.question import Question
from tabulate import tabulate

from balance_log_analyzer.aggregation import humanize_type, totals_parts
from balance_log_analyzer.analytics import AssetStats, Kpis, SymbolBlock, symbol_block_text
from balance_log_analyzer.config import (
    ParseOutcome,
    RowFilters,
    StoryInputs,
    SummaryRow,
    SwapLine,
    TotalsMap,
)
from balance_log_analyzer.formatting import MINUS_SIGN, fmt_money, fmt_trim
from balance_log_analyzer.i18n import Locales, friendly_label, text
from balance_log_analyzer.registry import BalanceLogSourceRegistry
from balance_log_analyzer.sources import BalanceLogSource, FileBalanceLogSource
from balance_log_analyzer.swaps import split_swap_text
from balance_log_analyzer.validators import (
    validate_amount,
    validate_asset,
    validate_baseline,
    validate_timestamp,
)

MainMenuAction = Literal[
    "load",
    "filters",
    "summary",
    "symbols",
    "swaps",
    "story",
    "audit",
    "narrative",
    "diagnostics",
    "exit_app",
]
BackAction = Literal["__back__"]
_TABLE_FORMAT = "simple_outline"
_MAIN_MENU_LABELS: dict[str, str] = {
    "load": "Load balance log",
    "filters": "Set filters",
    "summary": "Summary by type",
    "symbols": "Symbols & asset highlights",
    "swaps": "Swaps & events",
    "story": "Story inputs",
    "audit": "Agent audit",
    "narrative": "Narrative",
    "diagnostics": "Diagnostics",
    "exit_app": "Exit",
}
_ALWAYS_ENABLED_ACTIONS = ("load", "exit_app")


def _ask(
    question: Question,
    disable_escape_back: bool = False,
    block_typed_input: bool = False,
) -> Any:
    """Run a Questionary prompt with built-in ESC back handling."""
    if not disable_escape_back:
        escape_bindings = KeyBindings()

        @escape_bindings.add("escape", eager=True)
        def _(_event: KeyPressEvent) -> None:
            """Exit prompt immediately and return a back sentinel."""
            _event.app.exit(result="__back__")

        question.application.key_bindings = merge_key_bindings(
            [escape_bindings, question.application.key_bindings]
        )
    if block_typed_input:
        readonly_bindings = KeyBindings()

        def _ignore_keypress(_event: KeyPressEvent) -> None:
            """Ignore blocked key presses for read-only back prompts."""
            return

        readonly_bindings.add("enter", eager=True)(_ignore_keypress)
        for codepoint in range(32, 127):
            readonly_bindings.add(chr(codepoint), eager=True)(_ignore_keypress)
        question.application.key_bindings = merge_key_bindings(
            [readonly_bindings, question.application.key_bindings]
        )
    question.application.ttimeoutlen = 0
    question.application.timeoutlen = 0
    return question.unsafe_ask()


def clear_terminal_viewport() -> None:
    """Clear terminal viewport and scrollback, then reset cursor to top-left."""
    prompt_toolkit_clear()
    sys.stdout.write("\x1b[3J\x1b[2J\x1b[H")
    sys.stdout.flush()


def prompt_for_main_menu_action(has_rows: bool) -> MainMenuAction:
    """Prompt for one main-menu action and return selected command key."""
    disabled = None if has_rows else "No balance log loaded"
    question = questionary.select(
        "Balance Log Analyzer",
        choices=[
            questionary.Choice(
                label,
                action,
                disabled=None if action in _ALWAYS_ENABLED_ACTIONS else disabled,
            )
            for action, label in _MAIN_MENU_LABELS.items()
        ],
        erase_when_done=True,
    )
    return cast(MainMenuAction, _ask(question, disable_escape_back=True))


def prompt_for_source_class() -> type[BalanceLogSource] | BackAction:
    """Prompt for source class selection and return class or '__back__'."""
    question = questionary.select(
        "Select balance log source [esc to back]:",
        choices=[
            questionary.Choice(class_def.name(), class_def)
            for class_def in BalanceLogSourceRegistry.ls()
        ],
        erase_when_done=True,
    )
    return cast(type[BalanceLogSource] | BackAction, _ask(question))


def prompt_for_source(source_cls: type[BalanceLogSource]) -> BalanceLogSource | None:
    """Collect constructor arguments for source class using its validator map."""
    payload: dict[str, str] = {}
    for attr_name, validate in source_cls.validators().items():
        label = attr_name.replace("_", " ").title()
        if not issubclass(source_cls, FileBalanceLogSource):
            payload[attr_name] = _prompt_multiline(label, "", validate=validate)
            continue

        def _file_filter(
            raw: str,
            validate_fn: Callable[[str], bool | str] = validate,
        ) -> bool:
            path = Path(raw).expanduser().resolve()
            return path.is_dir() or (path.is_file() and validate_fn(str(path)) is True)

        answer = _prompt_text(
            label,
            "",
            validate=validate,
            completer=GreatUXPathCompleter(file_filter=_file_filter, expanduser=True),
        )
        if answer is None:
            return None
        payload[attr_name] = answer
    return source_cls(**payload)


def _prompt_text(message: str, default: str, **kwargs: Any) -> str | None:
    """Ask one free-text question; return None when the user backs out."""
    question = questionary.text(
        f"{message} [esc to back]:", default=default, erase_when_done=True, **kwargs
    )
    answer = _ask(question)
    return None if answer == "__back__" else str(answer).strip()


def _prompt_multiline(message: str, default: str, **kwargs: Any) -> str:
    """Ask one multi-line question; escape then enter submits, so back is unavailable."""
    question = questionary.text(
        f"{message} [esc, enter to finish]:",
        default=default,
        multiline=True,
        erase_when_done=True,
        **kwargs,
    )
    return str(_ask(question, disable_escape_back=True))


def prompt_for_filters(current: RowFilters, available_types: list[str]) -> RowFilters | None:
    """Prompt for time window, symbol substring and type selection."""
    t0 = _prompt_text("Start (UTC, YYYY-MM-DD HH:MM:SS)", current.t0, validate=validate_timestamp)
    if t0 is None:
        return None
    t1 = _prompt_text("End (UTC, YYYY-MM-DD HH:MM:SS)", current.t1, validate=validate_timestamp)
    if t1 is None:
        return None
    symbol = _prompt_text("Symbol contains", current.symbol)
    if symbol is None:
        return None
    question = questionary.checkbox(
        "Types to include, none selected means all [esc to back]:",
        choices=[
            questionary.Choice(type_key, type_key, checked=type_key in current.types)
            for type_key in available_types
        ],
        erase_when_done=True,
    )
    types = _ask(question)
    if types == "__back__":
        return None
    return RowFilters(t0=t0, t1=t1, symbol=symbol, types=frozenset(types))


def prompt_for_story_inputs(current: StoryInputs) -> StoryInputs | None:
    """Prompt for audit anchor, end, baseline, anchor transfer and language."""
    start = _prompt_text("Start time (UTC+0)", current.start, validate=validate_timestamp)
    if start is None:
        return None
    end = _prompt_text("End time (UTC+0)", current.end, validate=validate_timestamp)
    if end is None:
        return None
    baseline_text = _prompt_multiline(
        "Baseline, one 'ASSET amount' per line", current.baseline_text, validate=validate_baseline
    )
    transfer_amount = _prompt_text(
        "Transfer at start: amount", current.transfer_amount, validate=validate_amount
    )
    if transfer_amount is None:
        return None
    transfer_asset = _prompt_text(
        "Transfer at start: asset", current.transfer_asset, validate=validate_asset
    )
    if transfer_asset is None:
        return None
    question = questionary.select(
        "Narrative language [esc to back]:",
        choices=[
            questionary.Choice(f"{lang} ({Locales.config(lang).label})", lang)
            for lang in Locales.languages()
        ],
        default=Locales.resolve(current.lang),
        erase_when_done=True,
    )
    lang = _ask(question)
    if lang == "__back__":
        return None
    return StoryInputs(
        start=start,
        end=end,
        baseline_text=baseline_text,
        transfer_amount=transfer_amount,
        transfer_asset=transfer_asset,
        lang=lang,
    )


def wait_for_back_navigation() -> None:
    """Display read-only back prompt and wait until user dismisses it."""
    question = questionary.text("[esc to back]", erase_when_done=True)
    _ask(question, block_typed_input=True)


def _print_table(rows: list[list[str]], headers: list[str], colalign: tuple[str, ...]) -> None:
    """Print one outlined table with all cells treated as text."""
    table = tabulate(
        rows,
        headers=headers,
        tablefmt=_TABLE_FORMAT,
        disable_numparse=True,
        colalign=colalign,
    )
    print(table, flush=True)


def print_load_outcome(outcome: ParseOutcome, details: str) -> None:
    """Print load details, detection info and any advisory message."""
    lines = [details, *filter(None, [outcome.info, outcome.message])]
    lines.append(f"Rows parsed: {len(outcome.rows)}")
    print("\n".join(lines), flush=True)


def print_type_totals(ranked: list[tuple[str, TotalsMap]]) -> None:
    """Print one totals table per type, largest types first."""
    if not ranked:
        print("No rows match the current filters.", flush=True)
        return
    for type_key, totals in ranked:
        print(humanize_type(type_key), flush=True)
        _print_table(
            [
                [asset, f"+{fmt_trim(b.pos)}", f"{MINUS_SIGN}{fmt_trim(b.neg)}", fmt_trim(b.net)]
                for asset, b in totals.items()
            ],
            headers=["Asset", "In", "Out", "Net"],
            colalign=("left", "right", "right", "right"),
        )


def print_symbol_blocks(blocks: list[SymbolBlock]) -> None:
    """Print per-symbol totals as a table followed by copyable text blocks."""
    if not blocks:
        print("No symbol activity.", flush=True)
        return
    rows = []
    for block in blocks:
        for title, totals in block.sections():
            for asset in sorted(totals):
                rows.append([block.display_symbol, title, asset, totals_parts(totals[asset])])
    _print_table(
        rows,
        headers=["Symbol", "Section", "Asset", "Totals"],
        colalign=("left", "left", "left", "right"),
    )
    print("\n\n".join(symbol_block_text(block) for block in blocks), flush=True)


def print_asset_stats(stats: list[AssetStats]) -> None:
    """Print per-asset fee and PnL highlights."""
    if not stats:
        return

    def _day(day: tuple[str, float] | None, asset: str) -> str:
        return "-" if day is None else f"{day[0]} ({fmt_money(day[1], asset)})"

    _print_table(
        [
            [
                item.asset,
                fmt_money(item.realized_pnl, item.asset),
                fmt_money(item.commission, item.asset),
                fmt_money(item.funding, item.asset),
                fmt_money(item.other_fees, item.asset),
                fmt_money(item.net_pnl, item.asset),
                _day(item.best_day, item.asset),
                _day(item.worst_day, item.asset),
            ]
            for item in stats
        ],
        headers=[
            "Asset",
            "Realized PnL",
            "Trading Fees",
            "Funding",
            "Other Fees",
            "Net PnL (After Fees)",
            "Best Day",
            "Worst Day",
        ],
        colalign=("left", "right", "right", "right", "right", "right", "left", "left"),
    )


def print_swaps(
    coin_swaps: list[SwapLine],
    auto_exchanges: list[SwapLine],
    event_orders: TotalsMap,
    event_payouts: TotalsMap,
) -> None:
    """Print coin swaps, auto-exchanges and event-contract totals."""
    for title, lines in (("Coin Swaps", coin_swaps), ("Auto-Exchange", auto_exchanges)):
        print(title, flush=True)
        if not lines:
            print("  None", flush=True)
            continue
        _print_table(
            [list(split_swap_text(line)) for line in lines],
            headers=["Time (UTC)", "Out", "In"],
            colalign=("left", "left", "left"),
        )
    events = [
        ("Event Contracts: Orders", event_orders),
        ("Event Contracts: Payouts", event_payouts),
    ]
    for title, totals in events:
        print(title, flush=True)
        if not totals:
            print("  None", flush=True)
            continue
        _print_table(
            [[asset, totals_parts(bucket)] for asset, bucket in totals.items()],
            headers=["Asset", "Totals"],
            colalign=("left", "right"),
        )


def print_story_summary(summary_rows: list[SummaryRow], lang: str) -> None:
    """Print localized type/asset summary table used by the narrative."""
    _print_table(
        [
            [
                friendly_label(row.label, lang),
                row.asset,
                f"+{fmt_trim(row.in_)}" if row.in_ else "—",
                f"-{fmt_trim(row.out)}" if row.out else "—",
                "0" if row.net == 0 else f"{'+' if row.net > 0 else ''}{fmt_trim(row.net)}",
            ]
            for row in summary_rows
        ],
        headers=["Type", "Asset", text(lang, "in"), text(lang, "out"), text(lang, "net")],
        colalign=("left", "left", "right", "right", "right"),
    )


def print_series(title: str, points: list[tuple[str, float]], headers: list[str]) -> None:
    """Print a labelled two-column numeric series."""
    print(title, flush=True)
    _print_table(
        [[label, fmt_trim(value)] for label, value in points],
        headers=headers,
        colalign=("left", "right"),
    )


def print_text_block(title: str, body: str) -> None:
    """Print titled plain-text report."""
    print(f"{title}\n{'=' * len(title)}\n{body}", flush=True)


def print_diagnostics(kpis: Kpis) -> None:
    """Print row and type counters."""
    _print_table(
        [
            ["Rows parsed", str(kpis.total_rows)],
            ["Rows after filters", str(kpis.filtered_rows)],
            ["Unique symbols (filtered)", str(kpis.symbols)],
            ["Types found", str(kpis.types_found)],
        ],
        headers=["Metric", "Value"],
        colalign=("left", "right"),
    )


def print_error(error: Exception, action: str) -> None:
    """Print red frame titled with the failed menu action around its traceback."""
    title = f" {_MAIN_MENU_LABELS.get(action, action)} failed "
    error_lines = (
        "".join(traceback.format_exception(type(error), error, error.__traceback__))
        .rstrip("\n")
        .splitlines()
    )
    width = max(len(title), *(len(line) for line in error_lines))
    framed_error = "\n".join(
        [
            f"┌─{title}{'─' * (width + 1 - len(title))}┐",
            *[f"│ {line.ljust(width)} │" for line in error_lines],
            f"└{'─' * (width + 2)}┘",
        ]
    )
    print(f"\x1b[31m{framed_error}\x1b[0m", flush=True)
