"""Exception types for the trade journal."""


class TradeJournalError(Exception):
    """Base class for trade journal errors."""


class DataStoreError(TradeJournalError):
    """The data store could not be read or written."""


class InsufficientDataError(TradeJournalError):
    """Not enough trades for an analysis run."""

    def __init__(self, actual: int, required: int):
        self.actual = actual
        self.required = required
        super().__init__(f"Need at least {required} trades, found {actual}")


class SummarizerUnavailableError(TradeJournalError):
    """The hosted summarizer failed or could not be reached."""


class MalformedSummaryError(TradeJournalError):
    """The summarizer returned text without the expected JSON shape."""
