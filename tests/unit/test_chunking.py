"""Tests for chunked fetching."""

import json
from typing import List
from urllib.parse import parse_qs

import pytest

from census_query.core.chunking import CHUNK_SIZE, fetch, iter_chunks
from census_query.core.query import Query
from census_query.core.result import ResultSet
from census_query.errors import InvalidQueryError, MismatchedRowError, ServerSideError

STATES = ["01", "02", "04"]


def make_variables(n: int) -> List[str]:
    return [f"B{i:05d}_001E" for i in range(n)]


class FakeTransport:
    """Answers like the API: requested variables plus a state column."""

    def __init__(self, states=STATES):
        self.states = states
        self.requests: List[str] = []

    def variables_of(self, query_string: str) -> List[str]:
        get = parse_qs(query_string, keep_blank_values=True)["get"][0]
        return [v for v in get.split(",") if v]

    def respond(self, variables: List[str]) -> list:
        header = variables + ["state"]
        rows = [[f"{v}:{s}" for v in variables] + [s] for s in self.states]
        return [header] + rows

    async def __call__(self, query_string: str):
        self.requests.append(query_string)
        return self.respond(self.variables_of(query_string))


class TestIterChunks:
    """Tests for splitting a query into chunks."""

    def test_chunk_size_is_api_limit(self):
        assert CHUNK_SIZE == 50

    @pytest.mark.parametrize(
        "n,sizes",
        [
            (0, [0]),
            (1, [1]),
            (50, [50]),
            (51, [50, 1]),
            (100, [50, 50]),
            (120, [50, 50, 20]),
        ],
    )
    def test_chunk_sizes(self, n, sizes):
        """Chunks hold at most 50 variables and no empty trailing chunk."""
        q = Query().get(*make_variables(n))
        assert [len(c.variables) for c in iter_chunks(q)] == sizes

    def test_chunks_cover_variables_in_order(self):
        variables = make_variables(120)
        q = Query().get(*variables)
        flattened = [v for c in iter_chunks(q) for v in c.variables]
        assert flattened == variables

    def test_chunks_share_geography(self):
        q = Query().get(*make_variables(60)).for_("states")
        assert all(c.geo is q.geo for c in iter_chunks(q))

    def test_custom_chunk_size(self):
        q = Query().get(*make_variables(5))
        assert [len(c.variables) for c in iter_chunks(q, chunk_size=2)] == [2, 2, 1]


class TestFetch:
    """Tests for fetching and merging chunks."""

    async def test_single_chunk(self):
        transport = FakeTransport()
        q = Query().get("B01001_001E").for_("states")

        result = await fetch(q, transport)

        assert len(transport.requests) == 1
        assert transport.requests[0] == "for=state%3A*&get=B01001_001E"
        assert result.column_names == ["B01001_001E", "state"]
        assert result.column("state") == STATES

    async def test_large_query_is_merged(self):
        """120 variables take 3 requests and merge into one table."""
        transport = FakeTransport()
        variables = make_variables(120)
        q = Query().get(*variables).for_("states")

        result = await fetch(q, transport)

        assert [len(transport.variables_of(r)) for r in transport.requests] == [50, 50, 20]
        assert result.column_names == variables[:50] + ["state"] + variables[50:]
        assert len(result) == len(STATES)
        row = next(iter(result))
        assert all(row[v] == f"{v}:01" for v in variables)

    async def test_requests_in_offset_order(self):
        transport = FakeTransport()
        variables = make_variables(101)
        await fetch(Query().get(*variables), transport)

        firsts = [transport.variables_of(r)[0] for r in transport.requests]
        assert firsts == [variables[0], variables[50], variables[100]]

    async def test_exact_multiple_makes_no_empty_request(self):
        transport = FakeTransport()
        await fetch(Query().get(*make_variables(100)), transport)
        assert len(transport.requests) == 2

    async def test_same_as_manual_merge(self):
        """The fetched result equals merging the chunk responses by hand."""
        transport = FakeTransport()
        variables = make_variables(75)
        result = await fetch(Query().get(*variables), transport)

        expected = ResultSet.from_payload(transport.respond(variables[:50]))
        expected.merge(transport.respond(variables[50:]))
        assert result == expected

    async def test_error_object_stops_fetch(self):
        """An error object in place of a header fails without further requests."""
        transport = FakeTransport()
        calls = []

        async def failing(query_string):
            calls.append(query_string)
            if len(calls) == 2:
                return [{"error": "error: unknown variable 'B00050_001E'"}]
            return await transport(query_string)

        with pytest.raises(InvalidQueryError, match="unknown variable"):
            await fetch(Query().get(*make_variables(150)), failing)

        assert len(calls) == 2

    async def test_error_object_in_first_chunk(self):
        async def failing(query_string):
            return [{"error": "error: unknown variable"}]

        with pytest.raises(InvalidQueryError):
            await fetch(Query().get("B99"), failing)

    async def test_json_text_responses(self):
        """The transport may return raw JSON text."""
        transport = FakeTransport()

        async def text_transport(query_string):
            return json.dumps(await transport(query_string))

        result = await fetch(Query().get(*make_variables(60)), text_transport)
        assert len(result.column_names) == 61

    async def test_reordered_rows_fail(self):
        """A chunk returning rows in another order is rejected."""
        first = FakeTransport(["01", "02"])
        second = FakeTransport(["02", "01"])
        calls = []

        async def reordering(query_string):
            calls.append(query_string)
            t = first if len(calls) == 1 else second
            return await t(query_string)

        with pytest.raises(MismatchedRowError):
            await fetch(Query().get(*make_variables(60)), reordering)

    async def test_transport_errors_propagate(self):
        async def broken(query_string):
            raise ServerSideError("boom", status_code=500)

        with pytest.raises(ServerSideError):
            await fetch(Query().get("B01001_001E"), broken)

    async def test_progress_bar(self):
        transport = FakeTransport()
        result = await fetch(Query().get(*make_variables(60)), transport, show_progress=True)
        assert len(transport.requests) == 2
        assert len(result) == len(STATES)
