"""Interactive console application for exploring balance logs."""

import sys
from dataclasses import replace

from balance_log_analyzer import ui
from balance_log_analyzer.aggregation import (
    detected_types,
    filter_rows,
    group_by_type_and_asset,
    rank_types,
)
from balance_log_analyzer.analytics import (
    asset_net_bars,
    asset_stats,
    compute_kpis,
    daily_net_series,
    symbol_breakdown,
)
from balance_log_analyzer.config import Row, RowFilters, StoryInputs
from balance_log_analyzer.i18n import text
from balance_log_analyzer.logging_setup import configure_logging, get_logger
from balance_log_analyzer.story import build_story
from balance_log_analyzer.swaps import event_totals, group_swaps

_logger = get_logger("balance_log_analyzer.app")

_ACTION_EXCEPTIONS = (
    ArithmeticError,
    AttributeError,
    LookupError,
    OSError,
    RuntimeError,
    TypeError,
    UnicodeError,
    ValueError,
)


class App:
    """Stateful interactive console app for analyzing one balance log at a time."""

    def __init__(self) -> None:
        """Initialize empty in-session rows, filters and story inputs."""
        self.rows: list[Row] = []
        self.row_filters = RowFilters()
        self.inputs = StoryInputs()

    @property
    def filtered_rows(self) -> list[Row]:
        """Return loaded rows after the active filters."""
        return filter_rows(self.rows, self.row_filters)

    def run(self) -> None:
        """Run interactive main-menu loop."""
        while True:
            ui.clear_terminal_viewport()
            main_menu_action = ui.prompt_for_main_menu_action(bool(self.rows))
            try:
                getattr(self, main_menu_action)()
            except _ACTION_EXCEPTIONS as error:
                _logger.warning("Action %s failed: %s", main_menu_action, error)
                self._show_error(error, main_menu_action)

    def load(self) -> None:
        """CLI command: load rows from one source, replacing the current rows."""
        while True:
            source_class = ui.prompt_for_source_class()
            if source_class == "__back__":
                return
            source = ui.prompt_for_source(source_class)
            if source is None:
                continue
            break
        outcome = source.load()
        self.rows = list(outcome.rows)
        _logger.info("Loaded %d row(s) from %s.", len(self.rows), source.details)
        ui.print_load_outcome(outcome, source.details)
        ui.wait_for_back_navigation()

    def filters(self) -> None:
        """CLI command: edit time window, symbol and type filters."""
        unfiltered_by_type = filter_rows(self.rows, replace(self.row_filters, types=frozenset()))
        filters = ui.prompt_for_filters(self.row_filters, detected_types(unfiltered_by_type))
        if filters is not None:
            self.row_filters = filters

    def summary(self) -> None:
        """CLI command: show per-type totals ranked by magnitude."""
        ui.print_type_totals(rank_types(group_by_type_and_asset(self.filtered_rows)))
        ui.wait_for_back_navigation()

    def symbols(self) -> None:
        """CLI command: show per-symbol breakdown and per-asset highlights."""
        rows = self.filtered_rows
        ui.print_symbol_blocks(symbol_breakdown(rows))
        ui.print_asset_stats(asset_stats(rows))
        ui.wait_for_back_navigation()

    def swaps(self) -> None:
        """CLI command: show grouped swaps and event-contract totals."""
        rows = self.filtered_rows
        ui.print_swaps(
            group_swaps(rows, "COIN_SWAP"),
            group_swaps(rows, "AUTO_EXCHANGE"),
            *event_totals(rows),
        )
        ui.wait_for_back_navigation()

    def story(self) -> None:
        """CLI command: edit audit and narrative inputs."""
        inputs = ui.prompt_for_story_inputs(self.inputs)
        if inputs is not None:
            self.inputs = inputs

    def audit(self) -> None:
        """CLI command: show balance audit for the current inputs."""
        story = build_story(self.filtered_rows, self.inputs)
        ui.print_text_block(text(self.inputs.lang, "agentAudit"), story.audit.text)
        ui.wait_for_back_navigation()

    def narrative(self) -> None:
        """CLI command: show localized narrative, summary table and series."""
        rows = self.filtered_rows
        story = build_story(rows, self.inputs)
        lang = self.inputs.lang
        ui.print_text_block(text(lang, "narrative"), story.narrative)
        ui.print_text_block(text(lang, "summaryByTypeAsset"), "")
        ui.print_story_summary(story.summary_rows, lang)
        ui.print_series("Daily net (cumulative)", daily_net_series(rows), ["Day", "Net"])
        ui.print_series("Net by asset", asset_net_bars(rows), ["Asset", "Net"])
        ui.wait_for_back_navigation()

    def diagnostics(self) -> None:
        """CLI command: show row, symbol and type counters."""
        ui.print_diagnostics(compute_kpis(self.rows, self.filtered_rows))
        ui.wait_for_back_navigation()

    def exit_app(self) -> None:
        """Exit interactive run loop."""
        self._reset()
        sys.exit(0)

    def _reset(self) -> None:
        """Drop in-session rows, filters and inputs."""
        self.rows = []
        self.row_filters = RowFilters()
        self.inputs = StoryInputs()

    def _show_error(self, error: Exception, action: str) -> None:
        """Display framed error for the failed action and wait for the user to go back."""
        ui.print_error(error, action)
        ui.wait_for_back_navigation()


def main() -> None:
    """CLI entrypoint with clean Ctrl-C exit code."""
    configure_logging()
    app = App()
    try:
        app.run()
    except KeyboardInterrupt:
        app.exit_app()


if __name__ == "__main__":
    main()
