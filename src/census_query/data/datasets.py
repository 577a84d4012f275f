"""Known Census API datasets and their valid vintages."""

from dataclasses import dataclass
from typing import Dict, Tuple, Union

from census_query.core.query import Query
from census_query.errors import ConfigurationError

API_BASE = "https://api.census.gov/data"


@dataclass(frozen=True)
class DatasetInfo:
    """A Census data product and the vintages the API serves for it."""

    dataset_id: str
    path: str  # URL path below the vintage, e.g. "acs/acs5"
    valid_years: Tuple[int, ...]
    description: str = ""

    @property
    def newest_year(self) -> int:
        """Return the most recent vintage."""
        return max(self.valid_years)

    def url(self, year: int, base: str = API_BASE) -> str:
        """Return the endpoint URL for a vintage, without a query string."""
        return f"{base}/{year}/{self.path}"


DATASETS: Dict[str, DatasetInfo] = {
    "acs1": DatasetInfo(
        "acs1",
        "acs/acs1",
        tuple(y for y in range(2005, 2024) if y != 2020),
        "ACS 1-Year Estimates",
    ),
    "acs1_profile": DatasetInfo(
        "acs1_profile",
        "acs/acs1/profile",
        tuple(y for y in range(2010, 2024) if y != 2020),
        "ACS 1-Year Data Profiles",
    ),
    "acs3": DatasetInfo(
        "acs3",
        "acs/acs3",
        tuple(range(2007, 2014)),
        "ACS 3-Year Estimates (discontinued after 2013)",
    ),
    "acs5": DatasetInfo(
        "acs5",
        "acs/acs5",
        tuple(range(2009, 2024)),
        "ACS 5-Year Estimates",
    ),
    "sf1": DatasetInfo(
        "sf1",
        "dec/sf1",
        (2000, 2010),
        "Decennial Census Summary File 1",
    ),
    "sf3": DatasetInfo(
        "sf3",
        "dec/sf3",
        (2000,),
        "Decennial Census Summary File 3",
    ),
    "pl": DatasetInfo(
        "pl",
        "dec/pl",
        (2000, 2010, 2020),
        "Decennial Census Redistricting Data (PL 94-171)",
    ),
}


def get_dataset(dataset_id: str, datasets: Dict[str, DatasetInfo] = DATASETS) -> DatasetInfo:
    """
    Look up a dataset by id.

    Raises:
        ConfigurationError: If the dataset id is not registered
    """
    if dataset_id not in datasets:
        valid = ", ".join(datasets.keys())
        raise ConfigurationError(f"Unknown dataset: {dataset_id}. Valid datasets: {valid}")
    return datasets[dataset_id]


def validate_year(
    dataset_id: str,
    year: Union[int, str],
    datasets: Dict[str, DatasetInfo] = DATASETS,
) -> int:
    """
    Check that the API serves a vintage of a dataset.

    Returns:
        The year as an int

    Raises:
        ConfigurationError: If the year is not valid for the dataset
    """
    info = get_dataset(dataset_id, datasets)
    try:
        year = int(year)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid year '{year}' for dataset '{dataset_id}'")

    if year not in info.valid_years:
        raise ConfigurationError(f"Invalid year '{year}' for dataset '{dataset_id}'")
    return year


def api_url(
    dataset_id: str,
    year: Union[int, str],
    query: Query,
    datasets: Dict[str, DatasetInfo] = DATASETS,
    base: str = API_BASE,
) -> str:
    """Construct the URL that performs a query on a dataset vintage."""
    year = validate_year(dataset_id, year, datasets)
    return f"{datasets[dataset_id].url(year, base)}?{query.to_query_string()}"


def list_datasets(datasets: Dict[str, DatasetInfo] = DATASETS) -> Dict[str, str]:
    """List registered datasets with descriptions."""
    return {k: v.description for k, v in datasets.items()}
