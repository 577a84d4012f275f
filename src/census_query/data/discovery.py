"""Parsing and caching of the Census API discovery document (data.json)."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from census_query.errors import ConfigurationError

logger = logging.getLogger(__name__)

DISCOVERY_URL = "https://api.census.gov/data.json"
CACHE_FILENAME = "data.json"


@dataclass
class DatasetVintage:
    """One dataset vintage described by the discovery document."""

    dataset: List[str]  # path components, e.g. ["acs", "acs5"]
    vintage: Optional[int]  # None for timeseries datasets
    web_service: str
    title: str = ""
    description: str = ""
    identifier: str = ""
    geography_link: Optional[str] = None
    variables_link: Optional[str] = None
    is_aggregate: bool = False

    @property
    def path(self) -> str:
        """Return the dataset path, e.g. "acs/acs5"."""
        return "/".join(self.dataset)

    @classmethod
    def from_json(cls, entry: Dict[str, Any]) -> "DatasetVintage":
        """Create from one element of the document's "dataset" list."""
        web_service = entry.get("webService")
        if not web_service:
            distribution = entry.get("distribution") or [{}]
            web_service = distribution[0].get("accessURL", "")

        vintage = entry.get("c_vintage")
        return cls(
            dataset=list(entry.get("c_dataset", [])),
            vintage=int(vintage) if vintage is not None else None,
            web_service=web_service,
            title=entry.get("title", ""),
            description=entry.get("description", ""),
            identifier=entry.get("identifier", ""),
            geography_link=entry.get("c_geographyLink"),
            variables_link=entry.get("c_variablesLink"),
            is_aggregate=bool(entry.get("c_isAggregate", False)),
        )


@dataclass
class DatasetVintages:
    """All vintages of one dataset."""

    path: str
    vintages: Dict[int, DatasetVintage] = field(default_factory=dict)

    def add(self, vintage: DatasetVintage) -> None:
        if vintage.vintage is not None:
            self.vintages[vintage.vintage] = vintage

    @property
    def years(self) -> List[int]:
        return sorted(self.vintages)

    @property
    def newest(self) -> DatasetVintage:
        """Return the most recent vintage."""
        return self.vintages[max(self.vintages)]

    def __getitem__(self, year: int) -> DatasetVintage:
        if int(year) not in self.vintages:
            raise ConfigurationError(f"Unknown vintage {year} for dataset '{self.path}'")
        return self.vintages[int(year)]


class DatasetCatalog:
    """Datasets listed in the discovery document, keyed by dataset path."""

    def __init__(self, datasets: Optional[Dict[str, DatasetVintages]] = None):
        self._datasets = datasets or {}

    @classmethod
    def from_json(cls, doc: Dict[str, Any]) -> "DatasetCatalog":
        """Build a catalog from the parsed discovery document."""
        datasets: Dict[str, DatasetVintages] = {}
        for entry in doc.get("dataset", []):
            vintage = DatasetVintage.from_json(entry)
            if vintage.vintage is None:
                continue
            datasets.setdefault(vintage.path, DatasetVintages(vintage.path)).add(vintage)
        return cls(datasets)

    def paths(self) -> List[str]:
        return sorted(self._datasets)

    def __contains__(self, path: str) -> bool:
        return path in self._datasets

    def __getitem__(self, path: str) -> DatasetVintages:
        if path not in self._datasets:
            raise ConfigurationError(f"Unknown dataset: {path}")
        return self._datasets[path]

    def __len__(self) -> int:
        return len(self._datasets)


class DiscoveryCache:
    """
    Keeps a local copy of the discovery document.

    The document is large and changes rarely, so it is downloaded once and
    read from disk afterwards.
    """

    def __init__(self, cache_dir: Path):
        """
        Initialize cache.

        Args:
            cache_dir: Directory holding the cached document
        """
        self.cache_dir = cache_dir
        self.cache_path = cache_dir / CACHE_FILENAME

    async def load(
        self,
        download: Callable[[str], Awaitable[str]],
        refresh: bool = False,
    ) -> DatasetCatalog:
        """
        Load the catalog, downloading the document if it is not cached.

        Args:
            download: Async callable returning the body at a URL
            refresh: Download even if a cached copy exists

        Returns:
            Parsed dataset catalog
        """
        if self.cache_path.exists() and not refresh:
            logger.debug("Reading cached discovery document %s", self.cache_path)
            text = self.cache_path.read_text()
        else:
            text = await download(DISCOVERY_URL)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(text)

        return DatasetCatalog.from_json(json.loads(text))

    def clear(self) -> None:
        """Remove the cached document."""
        if self.cache_path.exists():
            self.cache_path.unlink()
