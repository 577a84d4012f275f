"""Geographic filters for Census API queries."""

from enum import Enum
from typing import Dict, Iterable, Mapping, Tuple, Union
from urllib.parse import quote_plus

from census_query.errors import ConfigurationError

WILDCARD = "*"


class GeoLevel(Enum):
    """Geographic summary levels recognized in result headers."""

    US = "us"
    REGION = "region"
    DIVISION = "division"
    STATE = "state"
    COUNTY = "county"
    TRACT = "tract"

    @classmethod
    def normalize(cls, name: str) -> str:
        """
        Normalize a level name, mapping plural aliases to the singular form.

        Unknown names are returned unchanged so callers can use levels the
        API supports but this enum does not list (e.g. "block group").

        Args:
            name: Level name such as "counties" or "state"

        Returns:
            Normalized level name
        """
        return LEVEL_ALIASES.get(name, name)


# Column names treated as geography when splitting a result header
LEVELS: Tuple[str, ...] = tuple(level.value for level in GeoLevel)

LEVEL_ALIASES: Dict[str, str] = {
    "regions": "region",
    "divisions": "division",
    "states": "state",
    "counties": "county",
    "tracts": "tract",
}

SummaryLevelSpec = Union[str, Mapping[str, str]]


def encode_form(pairs: Iterable[Tuple[str, str]]) -> str:
    """
    URL-form-encode key/value pairs the way the Census API expects.

    Reserved characters are percent-encoded and spaces become "+". The "*"
    wildcard is left bare. The value of the "in" parameter is split on "+"
    and each entry encoded separately, so its separators stay literal.
    """
    parts = []
    for key, value in pairs:
        if key == "in":
            encoded = "+".join(_quote(entry) for entry in value.split("+"))
        else:
            encoded = _quote(value)
        parts.append(f"{_quote(key)}={encoded}")
    return "&".join(parts)


def _quote(value: str) -> str:
    return quote_plus(value, safe=WILDCARD)


class Geography:
    """
    The "for"/"in" portion of a Census API request.

    The summary level selects the granularity of returned rows (one row per
    county, tract, ...). The containing geography scopes it, e.g. counties
    within one state:

        >>> geo = Geography()
        >>> geo.summary_level = "counties"
        >>> geo.contained_in = {"state": "06"}
        >>> geo.to_dict()
        {'for': 'county:*', 'in': 'state:06'}
    """

    def __init__(self):
        self._summary_level: Dict[str, str] = {}
        self._contained_in: Dict[str, str] = {}

    @property
    def summary_level(self) -> Dict[str, str]:
        return self._summary_level

    @summary_level.setter
    def summary_level(self, level: SummaryLevelSpec) -> None:
        self.set_summary_level(level)

    def set_summary_level(self, level: SummaryLevelSpec) -> None:
        """
        Set the summary level, replacing any previous one.

        Args:
            level: A level name (all geographies at that level) or a
                one-entry mapping from level name to a specific code
        """
        if isinstance(level, Mapping):
            if len(level) != 1:
                raise ConfigurationError(
                    f"Summary level must have exactly one entry, got {len(level)}"
                )
            name, code = next(iter(level.items()))
        else:
            name, code = level, WILDCARD

        self._summary_level = {GeoLevel.normalize(name): str(code)}

    @property
    def contained_in(self) -> Dict[str, str]:
        return self._contained_in

    @contained_in.setter
    def contained_in(self, container: Mapping[str, str]) -> None:
        self._contained_in = {k: str(v) for k, v in container.items()}

    def to_dict(self) -> Dict[str, str]:
        """Return the "for" and "in" request parameters."""
        level, code = next(iter((self._summary_level or {GeoLevel.US.value: WILDCARD}).items()))
        params = {"for": f"{level}:{code}"}

        if self._contained_in:
            params["in"] = "+".join(f"{k}:{v}" for k, v in self._contained_in.items())

        return params

    def to_query_string(self) -> str:
        """Return the geography portion of the API GET string."""
        return encode_form(self.to_dict().items())

    def __str__(self) -> str:
        return self.to_query_string()

    def __repr__(self) -> str:
        return f"Geography(for={self._summary_level!r}, in={self._contained_in!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Geography):
            return NotImplemented
        return (
            self._summary_level == other._summary_level
            and self._contained_in == other._contained_in
        )
