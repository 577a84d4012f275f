"""Core functionality for census-query."""

from census_query.core.chunking import CHUNK_SIZE, fetch, iter_chunks
from census_query.core.geography import GeoLevel, Geography
from census_query.core.query import Query
from census_query.core.result import ResultSet

__all__ = [
    "Geography",
    "GeoLevel",
    "Query",
    "ResultSet",
    "CHUNK_SIZE",
    "fetch",
    "iter_chunks",
]
