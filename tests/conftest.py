"""Shared pytest fixtures for network blocking and row-building helpers."""

import socket
import urllib.request

import pytest

from balance_log_analyzer.config import Row
from balance_log_analyzer.parser import parse_utc


@pytest.fixture(autouse=True)
def block_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block network access in all tests."""

    def blocked(*_args: object, **_kwargs: object) -> None:
        """Raise explicit error when any test attempts network access."""
        raise AssertionError("Network access is blocked in tests.")

    monkeypatch.setattr(urllib.request, "urlopen", blocked)
    monkeypatch.setattr(socket, "create_connection", blocked)
    monkeypatch.setattr(socket.socket, "connect", blocked)
    monkeypatch.setattr(socket.socket, "connect_ex", blocked)


def make_row(
    asset: str,
    type_: str,
    amount: float,
    time: str = "2023-01-01 12:00:00",
    symbol: str = "",
    extra: str = "",
    id_: str = "1",
) -> Row:
    """Build one parsed row with its timestamp derived from time text."""
    ts = parse_utc(time) if time else None
    return Row(
        id=id_,
        uid="u1",
        asset=asset,
        type=type_,
        amount=amount,
        time=time,
        ts=float("nan") if ts is None else ts,
        symbol=symbol,
        extra=extra,
    )


def tsv_line(*columns: str) -> str:
    """Join columns with tabs into one pasted balance-log line."""
    return "\t".join(columns)
