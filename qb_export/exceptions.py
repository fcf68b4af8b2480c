"""Exception hierarchy for the export pipeline.

Only ``NoDataError`` ever reaches a caller. Source failures are raised by
the sources and absorbed by the load resolver.
"""


class ExportError(Exception):
    """Base class for export failures."""


class SourceUnavailableError(ExportError):
    """A local or remote load source could not be queried."""


class RemoteTimeoutError(SourceUnavailableError):
    """The remote load source did not answer within the bounded wait."""


class NoDataError(ExportError):
    """Neither source produced any confirmed loads for the requested scope."""

    DEFAULT_MESSAGE = "No confirmed loads found. Check that loads are synced."

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)
