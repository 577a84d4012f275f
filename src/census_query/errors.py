"""Exception hierarchy for census-query."""

from typing import Optional


class CensusQueryError(Exception):
    """Base exception for all library errors."""

    pass


class ConfigurationError(CensusQueryError):
    """A query or client is configured incorrectly (e.g. invalid year for a dataset)."""

    pass


class CensusApiError(CensusQueryError):
    """Error returned by the Census data API."""

    def __init__(
        self,
        message: str = "",
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.status_code = status_code
        if not message and status_code is not None:
            message = f"Unexpected HTTP response code: {status_code}"
        super().__init__(message)


class InvalidQueryError(CensusApiError):
    """The API rejected the query (unknown variables, bad geography, too many columns)."""

    pass


class InvalidKeyError(CensusApiError):
    """The API key is missing or invalid."""

    pass


class NoMatchingRecordsError(CensusApiError):
    """The query was valid but matched no records."""

    pass


class ServerSideError(CensusApiError):
    """The API failed on its end."""

    pass


class MergeError(CensusQueryError):
    """Chunked results could not be merged into one table."""

    pass


class MismatchedGeographyError(MergeError):
    """Two chunks list different geography columns."""

    pass


class MismatchedRowError(MergeError):
    """Two chunks disagree on the geography of a row."""

    pass
