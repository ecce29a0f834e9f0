"""Exception hierarchy for macrodash.

Adapters raise subclasses of :class:`UpstreamError`; the aggregator catches
them per indicator and only raises :class:`NoDataAvailableError` when nothing
at all could be fetched. Analytics never raise for short or empty series.
"""


class MacroDashError(Exception):
    """Base class for all macrodash errors."""


class UpstreamError(MacroDashError):
    """A provider call did not yield usable data."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class TransportError(UpstreamError):
    """Network, timeout or HTTP-status failure reaching the provider."""


class UpstreamSchemaError(UpstreamError):
    """Provider responded but the payload is missing the expected structure."""


class UpstreamStatusError(UpstreamError):
    """Provider payload carries an explicit failure status/message."""


class NoDataAvailableError(MacroDashError):
    """Every requested indicator failed; there is nothing to display."""

    def __init__(self, keys: list[str], errors: dict[str, Exception] | None = None) -> None:
        self.keys = keys
        self.errors = errors or {}
        super().__init__(f"No data available for any of {len(keys)} requested indicators")
