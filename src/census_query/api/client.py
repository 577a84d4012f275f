"""HTTP client for the Census data API."""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

import aiohttp
from yarl import URL

from census_query.core.chunking import fetch
from census_query.core.query import Query
from census_query.core.result import ResultSet
from census_query.data.datasets import (
    API_BASE,
    DATASETS,
    DatasetInfo,
    get_dataset,
    validate_year,
)
from census_query.data.discovery import DatasetCatalog, DatasetVintage, DiscoveryCache
from census_query.data.keystore import DEFAULT_DATA_DIR, KEY_FILENAME, KeyStore
from census_query.errors import (
    CensusApiError,
    InvalidKeyError,
    InvalidQueryError,
    NoMatchingRecordsError,
    ServerSideError,
)

logger = logging.getLogger(__name__)

_KEY_PARAM = re.compile(r"(?<=[?&]key=)[^&]*")


def _mask_key(url: str) -> str:
    return _KEY_PARAM.sub("***", url)


class CensusClient:
    """
    Queries the Census data API.

    Queries with more than 50 variables are split into several requests
    (the API limit) and the responses merged into one ResultSet.

    All request methods are async and use aiohttp.

    Example usage:
        >>> client = CensusClient()
        >>> q = Query().get("B01001_001E", "B19013_001E").for_("counties").in_({"state": "06"})
        >>> result = await client.query("acs5", 2019, q)
        >>> await client.close()
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        timeout: int = 60,
        key_store: Optional[KeyStore] = None,
        datasets: Optional[Dict[str, DatasetInfo]] = None,
        api_base: str = API_BASE,
    ):
        """
        Initialize client.

        Args:
            data_dir: Directory for the installed key and cached discovery
                document. Defaults to ~/.census-query/
            timeout: Request timeout in seconds
            key_store: Source of the installed API key. Defaults to a key
                file in data_dir
            datasets: Dataset registry. Defaults to DATASETS
            api_base: Base URL of the data API
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self.timeout = timeout
        self.key_store = key_store or KeyStore(self.data_dir / KEY_FILENAME)
        self.datasets = datasets if datasets is not None else DATASETS
        self.api_base = api_base
        self.discovery_cache = DiscoveryCache(self.data_dir / "cache")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "census-query/0.1.0"},
            )
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def install_key(self, key: str) -> None:
        """Install a key so queries without an explicit key can use it."""
        self.key_store.write_installed_key(key)

    def api_url(self, dataset: str, year: Union[int, str], query: Query) -> str:
        """
        Construct the URL that performs a query.

        Args:
            dataset: Registered dataset id, e.g. "acs5"
            year: Dataset vintage
            query: Query to serialize

        Returns:
            Full request URL

        Raises:
            ConfigurationError: If the dataset or year is unknown
        """
        return f"{self._endpoint(dataset, year)}?{self._with_key_store(query).to_query_string()}"

    def _endpoint(self, dataset: str, year: Union[int, str]) -> str:
        info = get_dataset(dataset, self.datasets)
        return info.url(validate_year(dataset, year, self.datasets), self.api_base)

    def _with_key_store(self, query: Query) -> Query:
        """Return the query, or a full-range copy of it using this client's key store."""
        if query.key_store is not None:
            return query
        q = query[:]
        q.key_store = self.key_store
        return q

    async def query_raw(self, dataset: str, year: Union[int, str], query: Query) -> str:
        """
        Perform a single request and return the unmodified response body.

        No chunking is done, so the query must not exceed the API's
        variable limit.
        """
        return await self._send(self.api_url(dataset, year, query))

    async def query(
        self,
        dataset: str,
        year: Union[int, str],
        query: Query,
        show_progress: bool = False,
    ) -> ResultSet:
        """
        Query a dataset vintage, fetching variables in chunks of 50.

        Args:
            dataset: Registered dataset id, e.g. "acs5"
            year: Dataset vintage
            query: Query with any number of variables
            show_progress: Show a progress bar over chunks

        Returns:
            Merged result of all chunks
        """
        return await self._fetch(self._endpoint(dataset, year), query, show_progress)

    async def query_vintage(
        self,
        vintage: DatasetVintage,
        query: Query,
        show_progress: bool = False,
    ) -> ResultSet:
        """Query a dataset vintage found through :meth:`discover`."""
        return await self._fetch(vintage.web_service, query, show_progress)

    async def discover(self, refresh: bool = False) -> DatasetCatalog:
        """
        Load the catalog of datasets from the API discovery document.

        The document is cached in data_dir and only downloaded when missing
        or when refresh is set.
        """
        return await self.discovery_cache.load(self._send, refresh=refresh)

    async def _fetch(self, endpoint: str, query: Query, show_progress: bool) -> ResultSet:
        async def transport(query_string: str) -> str:
            return await self._send(f"{endpoint}?{query_string}")

        return await fetch(self._with_key_store(query), transport, show_progress=show_progress)

    async def _send(self, url: str) -> str:
        """
        Perform a GET request and return the body.

        Raises:
            InvalidQueryError: HTTP 400
            NoMatchingRecordsError: HTTP 204
            ServerSideError: HTTP 500
            InvalidKeyError: Redirect to the API's missing/invalid key page
            CensusApiError: Any other status, or a connection failure
        """
        session = await self._get_session()
        logger.debug("GET %s", _mask_key(url))

        try:
            async with session.get(URL(url, encoded=True), allow_redirects=False) as response:
                status = response.status
                body = await response.text()
                headers = dict(response.headers)
        except aiohttp.ClientError as e:
            raise CensusApiError(f"Request failed: {e}", url=_mask_key(url), status_code=0)

        if status == 200:
            return body

        url = _mask_key(url)
        if status == 400:
            raise InvalidQueryError(f"Invalid query. {body}".strip(), url=url, status_code=400)
        if status == 204:
            raise NoMatchingRecordsError("No matching records", url=url, status_code=204)
        if status == 500:
            raise ServerSideError(f"Server error. {body}".strip(), url=url, status_code=500)
        if 300 <= status < 400 and any(
            "missing_key" in v or "invalid_key" in v for v in headers.values()
        ):
            raise InvalidKeyError("Missing or invalid API key", url=url, status_code=status)

        raise CensusApiError(url=url, status_code=status)
