"""Census API query construction."""

from typing import Dict, List, Mapping, Optional

from census_query.core.geography import Geography, SummaryLevelSpec, encode_form
from census_query.data.keystore import KeyStore


class Query:
    """
    A request to the Census data API: variables, geography and credentials.

    The builder methods mirror the field names of the HTTP GET string and
    return the query itself, so calls can be chained:

        >>> q = Query().get("B01001_001E", "B19013_001E").for_("counties").in_({"state": "06"})
        >>> q.to_dict()["for"]
        'county:*'

    Slicing a query (``query[50:100]``) produces a new Query holding a subset
    of the variables. The slice shares this query's Geography object rather
    than copying it, so changing the slice's geography changes the original.
    """

    def __init__(
        self,
        variables: Optional[List[str]] = None,
        geo: Optional[Geography] = None,
        api_key: Optional[str] = None,
        key_store: Optional[KeyStore] = None,
    ):
        """
        Initialize query.

        Args:
            variables: Variable codes to request, in output column order
            geo: Geographic filter. Defaults to the whole US
            api_key: Explicit API key
            key_store: Fallback source for an installed key when api_key is unset
        """
        self.variables: List[str] = list(variables) if variables else []
        self.geo = geo if geo is not None else Geography()
        self.api_key = api_key
        self.key_store = key_store

    def get(self, *variables: str) -> "Query":
        """Set the variables to request."""
        self.variables = list(variables)
        return self

    def for_(self, level: SummaryLevelSpec) -> "Query":
        """Set the summary level, e.g. "counties" or {"state": "06"}."""
        self.geo.summary_level = level
        return self

    def in_(self, container: Mapping[str, str]) -> "Query":
        """Set the containing geography, e.g. {"state": "06"}."""
        self.geo.contained_in = container
        return self

    def key(self, api_key: str) -> "Query":
        """Set an explicit API key."""
        self.api_key = api_key
        return self

    def resolved_api_key(self) -> Optional[str]:
        """
        Return the API key to use for this query.

        Falls back to the key store's installed key when no key was set
        explicitly. Returns None when neither is available.
        """
        if self.api_key:
            return self.api_key
        if self.key_store is not None:
            return self.key_store.read_installed_key()
        return None

    def __getitem__(self, rng: slice) -> "Query":
        if not isinstance(rng, slice):
            raise TypeError(f"Query indices must be slices, not {type(rng).__name__}")

        return Query(
            variables=self.variables[rng],
            geo=self.geo,
            api_key=self.api_key,
            key_store=self.key_store,
        )

    def to_dict(self) -> Dict[str, str]:
        """Return the request parameters as a dict."""
        params: Dict[str, str] = {}

        api_key = self.resolved_api_key()
        if api_key:
            params["key"] = api_key

        params.update(self.geo.to_dict())
        params["get"] = ",".join(self.variables)
        return params

    def to_query_string(self) -> str:
        """Return the query portion of the API GET string."""
        return encode_form(self.to_dict().items())

    def __str__(self) -> str:
        return self.to_query_string()

    def __repr__(self) -> str:
        return f"Query(variables={self.variables!r}, geo={self.geo!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return (
            self.variables == other.variables
            and self.geo == other.geo
            and self.api_key == other.api_key
        )
