"""
census-query: a client for the U.S. Census Bureau data API.

Build queries from variables and geography filters, and get back one
merged table even when a query exceeds the API's 50-variable limit.

Supports:
- Chunked requests: large variable lists are split and merged by geography
- Registered datasets (ACS, decennial) with vintage validation
- Installed API keys and the API discovery document
"""

from census_query.api.client import CensusClient
from census_query.core.chunking import CHUNK_SIZE, fetch, iter_chunks
from census_query.core.geography import LEVELS, GeoLevel, Geography
from census_query.core.query import Query
from census_query.core.result import ResultSet
from census_query.data.datasets import (
    DATASETS,
    DatasetInfo,
    api_url,
    get_dataset,
    list_datasets,
    validate_year,
)
from census_query.data.discovery import DatasetCatalog, DatasetVintage, DatasetVintages
from census_query.data.keystore import KeyStore
from census_query.errors import (
    CensusApiError,
    CensusQueryError,
    ConfigurationError,
    InvalidKeyError,
    InvalidQueryError,
    MergeError,
    MismatchedGeographyError,
    MismatchedRowError,
    NoMatchingRecordsError,
    ServerSideError,
)

__version__ = "0.1.0"
__all__ = [
    # Main API
    "CensusClient",
    "Query",
    "Geography",
    "GeoLevel",
    "LEVELS",
    "ResultSet",
    # Chunking
    "CHUNK_SIZE",
    "fetch",
    "iter_chunks",
    # Datasets
    "DATASETS",
    "DatasetInfo",
    "api_url",
    "get_dataset",
    "list_datasets",
    "validate_year",
    "DatasetCatalog",
    "DatasetVintage",
    "DatasetVintages",
    # Keys
    "KeyStore",
    # Exceptions
    "CensusQueryError",
    "ConfigurationError",
    "CensusApiError",
    "InvalidQueryError",
    "InvalidKeyError",
    "NoMatchingRecordsError",
    "ServerSideError",
    "MergeError",
    "MismatchedGeographyError",
    "MismatchedRowError",
]
