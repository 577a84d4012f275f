"""Example: a query with more variables than the API allows per request.

The Census API accepts at most 50 variables per request. CensusClient splits
larger queries into chunks, fetches them one after another, and merges the
responses into a single table by geography.
"""

import asyncio

from census_query import CensusClient, Query

# Sex by age: all 49 cells of table B01001, plus educational attainment (25 cells)
VARIABLES = [f"B01001_{i:03d}E" for i in range(1, 50)] + [
    f"B15003_{i:03d}E" for i in range(1, 26)
]


async def main():
    client = CensusClient()
    query = Query().get(*VARIABLES).for_("states")

    try:
        result = await client.query("acs5", 2019, query, show_progress=True)
    finally:
        await client.close()

    df = result.to_dataframe()
    print(f"{len(df)} rows x {len(df.columns)} columns")
    print(df[["state", "B01001_001E", "B15003_022E"]].head())


if __name__ == "__main__":
    asyncio.run(main())
