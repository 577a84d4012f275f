"""Helper functions for functional tests with mocked HTTP responses.

This module provides helpers that imitate the Census data API:
- Table responses for any requested variables
- Callbacks for aioresponses that answer per requested chunk

All mock data is synthetic, for the first three California counties.
"""

import re
from typing import List, Optional

from aioresponses import CallbackResult

CA_STATE_FIPS = "06"
CA_COUNTIES = ["001", "003", "005"]

ACS5_PATTERN = re.compile(r"^https://api\.census\.gov/data/2019/acs/acs5\?.*")
DISCOVERY_PATTERN = re.compile(r"^https://api\.census\.gov/data\.json")


def make_variables(n: int) -> List[str]:
    """Generate n distinct ACS-style variable codes."""
    return [f"B{i:05d}_001E" for i in range(n)]


def requested_variables(url) -> List[str]:
    """Variables named in the get parameter of a request URL."""
    get_param = url.query.get("get", "")
    return [v for v in get_param.split(",") if v]


def create_api_response(variables: List[str], counties: Optional[List[str]] = None) -> list:
    """Create a Census API JSON response: header row, then one row per county."""
    counties = counties or CA_COUNTIES
    header = variables + ["state", "county"]

    rows = [header]
    for county in counties:
        values = [f"{v}:{county}" for v in variables]
        rows.append(values + [CA_STATE_FIPS, county])
    return rows


class ApiRecorder:
    """aioresponses callback that answers like the API and records requests."""

    def __init__(self, counties: Optional[List[str]] = None):
        self.counties = counties
        self.urls = []

    def __call__(self, url, **kwargs):
        self.urls.append(url)
        return CallbackResult(
            status=200,
            payload=create_api_response(requested_variables(url), self.counties),
        )

    @property
    def chunk_sizes(self) -> List[int]:
        return [len(requested_variables(u)) for u in self.urls]


def create_discovery_doc() -> dict:
    """Create a minimal discovery document with two ACS 5-year vintages."""
    return {
        "dataset": [
            {
                "c_vintage": year,
                "c_dataset": ["acs", "acs5"],
                "c_isAggregate": True,
                "title": f"ACS 5-Year Detailed Tables {year}",
                "distribution": [{"accessURL": f"https://api.census.gov/data/{year}/acs/acs5"}],
            }
            for year in (2018, 2019)
        ]
    }
