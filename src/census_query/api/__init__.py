"""HTTP access to the Census data API."""

from census_query.api.client import CensusClient

__all__ = ["CensusClient"]
