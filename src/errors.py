from typing import Optional


class LedgerError(Exception):
    """Base class for errors that abort processing of an input source."""


class TransactionParseError(LedgerError):
    """A transaction source is structurally malformed."""

    def __init__(self, reason: str, source: str = "<stream>", line_number: Optional[int] = None):
        self.reason = reason
        self.source = source
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.source if self.line_number is None else f"{self.source}:{self.line_number}"
        return f"{location}: {self.reason}"


class InvalidHeaderError(TransactionParseError):
    """The header row is missing required columns or repeats a column."""
