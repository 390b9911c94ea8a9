"""Tolerant balance-log parsing from pasted text and HTML table fragments."""

import calendar
import math
import re
from collections.abc import Iterator
from html.parser import HTMLParser

from balance_log_analyzer.config import MIN_COLUMNS, ParseOutcome, Row
from balance_log_analyzer.logging_setup import get_logger

_logger = get_logger("balance_log_analyzer.parser")

NOTHING_PARSEABLE_MESSAGE = (
    "Nothing parseable was found on the clipboard. Try copying the table itself."
)
NO_VALID_ROWS_MESSAGE = "No valid rows detected."

_EXOTIC_SPACE_RE = re.compile("[\u00a0\u2000-\u200b]")
_LINE_BREAK_RE = re.compile(r"\r?\n")
_TAB_RUN_RE = re.compile(r"\t+")
_SPACE_SPLIT_RE = re.compile(r"\s{2,}|\s\|\s|\s+")
_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2} \d{1,2}:\d{2}:\d{2})", re.ASCII)
_LOOSE_TIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{1,2}):(\d{2}):(\d{2})$", re.ASCII)
_UTC_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2}):(\d{2})$", re.ASCII)
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$", re.ASCII)
_VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


def normalize_whitespace(text: str) -> str:
    """Replace non-breaking and zero-width spaces with regular spaces."""
    return _EXOTIC_SPACE_RE.sub(" ", text)


def split_columns(line: str) -> list[str]:
    """Split one line on tab runs, or on wide/pipe/plain whitespace separators."""
    if "\t" in line:
        return _TAB_RUN_RE.split(line)
    return _SPACE_SPLIT_RE.split(line.strip())


def normalize_time(text: str) -> str:
    """Zero-pad single-digit hours in 'YYYY-MM-DD H:MM:SS' timestamps."""
    if not (match := _LOOSE_TIME_RE.match(text)):
        return text
    day, hour, minute, second = match.groups()
    return f"{day} {hour.zfill(2)}:{minute}:{second}"


def parse_utc(text: str) -> float | None:
    """Parse strict 'YYYY-MM-DD HH:MM:SS' UTC text into epoch milliseconds."""
    if not (match := _UTC_RE.match(text.strip())):
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.groups())
    try:
        seconds = calendar.timegm((year, month, day, hour, minute, second))
    except ValueError:
        return None
    return float(seconds * 1000)


def parse_amount(text: str) -> float | None:
    """Parse decimal or scientific amount text; return None when not a finite number."""
    stripped = text.strip()
    if not stripped:
        return 0.0
    if not _NUMBER_RE.match(stripped):
        return None
    value = float(stripped)
    return value if math.isfinite(value) else None


def _find_time(columns: list[str]) -> str:
    """Return normalized time from the first column carrying a timestamp."""
    for column in columns:
        if match := _DATE_RE.search(column):
            return normalize_time(match.group(1))
    return ""


def parse_line(line: str) -> Row | None:
    """Parse one trimmed line into a row, or None when it is not a valid entry."""
    columns = split_columns(line)
    if len(columns) < MIN_COLUMNS:
        return None
    amount = parse_amount(columns[4])
    if amount is None:
        return None
    time = _find_time(columns)
    ts = parse_utc(time)
    return Row(
        id=columns[0],
        uid=columns[1],
        asset=columns[2],
        type=columns[3],
        amount=amount,
        time=time,
        ts=math.nan if ts is None else ts,
        symbol=columns[6] if len(columns) > 6 else "",
        extra=" ".join(columns[7:]),
        raw=line,
    )


def parse_balance_log(text: str) -> list[Row]:
    """Parse pasted balance-log text into rows, skipping invalid lines."""
    lines = [line.strip() for line in _LINE_BREAK_RE.split(normalize_whitespace(text))]
    lines = [line for line in lines if line]
    rows = [row for row in map(parse_line, lines) if row is not None]
    _logger.debug("Parsed %d row(s), skipped %d line(s).", len(rows), len(lines) - len(rows))
    return rows


class _Node:
    """Minimal element node used for table extraction."""

    __slots__ = ("tag", "children")

    def __init__(self, tag: str) -> None:
        self.tag = tag
        self.children: list["_Node | str"] = []

    def iter(self, *tags: str) -> Iterator["_Node"]:
        """Yield descendant elements matching any tag, in document order."""
        for child in self.children:
            if isinstance(child, _Node):
                if child.tag in tags:
                    yield child
                yield from child.iter(*tags)

    def text_content(self) -> str:
        """Return concatenated text of all descendants."""
        return "".join(
            child if isinstance(child, str) else child.text_content() for child in self.children
        )


class _TreeBuilder(HTMLParser):
    """Build a lenient element tree, closing open cells and rows implicitly."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = _Node("#document")
        self._stack = [self.root]

    def _close_until(self, targets: set[str], stop: set[str]) -> None:
        for index in range(len(self._stack) - 1, 0, -1):
            tag = self._stack[index].tag
            if tag in targets:
                del self._stack[index:]
                return
            if tag in stop:
                return

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in {"td", "th"}:
            self._close_until({"td", "th"}, {"tr", "table"})
        elif tag == "tr":
            self._close_until({"tr"}, {"table"})
        node = _Node(tag)
        self._stack[-1].children.append(node)
        if tag not in _VOID_TAGS:
            self._stack.append(node)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._stack[-1].children.append(_Node(tag))

    def handle_endtag(self, tag: str) -> None:
        self._close_until({tag}, set())

    def handle_data(self, data: str) -> None:
        self._stack[-1].children.append(data)


def html_to_grid(html: str) -> list[list[str]]:
    """Extract cell texts from the HTML table with the highest rows-by-cells score."""
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    best: _Node | None = None
    best_score = -1
    for table in builder.root.iter("table"):
        score = sum(1 for _ in table.iter("tr")) * sum(1 for _ in table.iter("td", "th"))
        if score > best_score:
            best, best_score = table, score
    if best is None:
        return []
    grid = []
    for tr in best.iter("tr"):
        if row := [cell.text_content().strip() for cell in tr.iter("th", "td")]:
            grid.append(row)
    return grid


def text_to_grid(text: str) -> list[list[str]]:
    """Split plain clipboard text into a grid of cells."""
    if not text:
        return []
    lines = [line for line in _LINE_BREAK_RE.split(text) if line.strip()]
    if "\t" in text:
        return [line.split("\t") for line in lines]
    return [_SPACE_SPLIT_RE.split(line.strip()) for line in lines]


def grid_to_tsv(grid: list[list[str]]) -> str:
    """Join grid rows with tabs and newlines."""
    return "\n".join("\t".join(row) for row in grid)


def parse_pasted_text(text: str) -> ParseOutcome:
    """Parse text and attach the empty-result advisory when no rows survive."""
    rows = parse_balance_log(text)
    return ParseOutcome(rows=rows, message="" if rows else NO_VALID_ROWS_MESSAGE)


def parse_clipboard(html: str = "", text: str = "") -> ParseOutcome:
    """Parse rich clipboard payload, preferring an HTML table over plain text."""
    grid = html_to_grid(html) if html else []
    if not grid:
        grid = text_to_grid(text)
    if not grid:
        return ParseOutcome(message=NOTHING_PARSEABLE_MESSAGE)
    outcome = parse_pasted_text(grid_to_tsv(grid))
    info = f"Detected {len(grid)} row(s) × {max(len(row) for row in grid)} col(s)."
    return ParseOutcome(rows=outcome.rows, message=outcome.message, info=info)
