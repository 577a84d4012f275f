"""Split large queries into API-sized chunks and merge the results."""

import logging
from typing import Awaitable, Callable, Iterator, List

from tqdm import tqdm

from census_query.core.query import Query
from census_query.core.result import Payload, ResultSet, parse_payload
from census_query.errors import InvalidQueryError

logger = logging.getLogger(__name__)

# Census API limit on variables per request
CHUNK_SIZE = 50

Transport = Callable[[str], Awaitable[Payload]]


def iter_chunks(query: Query, chunk_size: int = CHUNK_SIZE) -> Iterator[Query]:
    """
    Yield sub-queries of at most chunk_size variables, in variable order.

    The first chunk is always yielded, even for a query with no variables.
    """
    yield query[0:chunk_size]

    offset = chunk_size
    while offset < len(query.variables):
        yield query[offset : offset + chunk_size]
        offset += chunk_size


def _check_payload(raw: Payload) -> List:
    table = parse_payload(raw)

    # The API answers some malformed column requests with a descriptive
    # object (in a single element array) instead of a header row
    if table and isinstance(table[0], dict):
        raise InvalidQueryError(f"API rejected the requested columns: {table[0]}")

    return table


async def fetch(query: Query, transport: Transport, show_progress: bool = False) -> ResultSet:
    """
    Fetch all variables of a query, one chunk at a time.

    Chunks are requested sequentially: merging relies on every chunk
    returning rows in the same order, so they must not be fetched
    concurrently. Any error aborts the fetch; no partial result is returned.

    Args:
        query: Query with any number of variables
        transport: Async callable taking a query string and returning the
            raw JSON response
        show_progress: Show a progress bar over chunks

    Returns:
        One ResultSet holding every requested variable
    """
    chunks = list(iter_chunks(query))
    result = None

    with tqdm(total=len(chunks), desc="Fetching chunks", disable=not show_progress) as pbar:
        for i, chunk in enumerate(chunks):
            logger.debug(
                "Fetching chunk %d/%d (%d variables)", i + 1, len(chunks), len(chunk.variables)
            )
            table = _check_payload(await transport(chunk.to_query_string()))

            if result is None:
                result = ResultSet.from_payload(table)
            else:
                result.merge(table)
            pbar.update(1)

    return result
