"""
Error types raised by the ingestion pipeline.

Only AllSourcesUnavailableError is expected to reach callers of the cache;
the rest are handled inside the pipeline.
"""


class AggregatorError(Exception):
    """Base class for blog aggregator failures."""


class ExternalSourceError(AggregatorError):
    """A feed could not be fetched after exhausting retries."""

    def __init__(self, source_name: str, cause: Exception = None):
        self.source_name = source_name
        self.cause = cause
        message = f"{source_name} feed unavailable"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class AllSourcesUnavailableError(AggregatorError):
    """Every feed failed during a blocking refresh."""

    def __init__(self, errors: list = None):
        self.errors = errors or []
        super().__init__('All blog sources are currently unavailable. Please try again later.')
