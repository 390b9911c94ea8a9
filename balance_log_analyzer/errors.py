"""Exception types raised by balance-log components."""


class BalanceLogError(Exception):
    """Base class for all balance-log analyzer errors."""


class BaselineParseError(BalanceLogError, ValueError):
    """Raised when one baseline line cannot be parsed; the whole baseline is rejected."""

    def __init__(self, line: str) -> None:
        super().__init__(f'Could not parse: "{line}"')
        self.line = line
