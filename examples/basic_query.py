"""Basic example of using census-query."""

import asyncio

from census_query import CensusClient, Query


async def main():
    # Uses the key installed with `census-query install-key <KEY>`, if any
    client = CensusClient()

    # Median household income and population for every county in California
    query = (
        Query()
        .get("NAME", "B01001_001E", "B19013_001E")
        .for_("counties")
        .in_({"state": "06"})
    )

    print("=" * 60)
    print("Request")
    print("=" * 60)
    print(client.api_url("acs5", 2019, query))

    try:
        result = await client.query("acs5", 2019, query)
    finally:
        await client.close()

    print("\n" + "=" * 60)
    print(f"{len(result)} counties")
    print("=" * 60)
    for row in list(result)[:5]:
        print(f"{row['NAME']:40s} pop={row['B01001_001E']:>10s} income={row['B19013_001E']:>8s}")


if __name__ == "__main__":
    asyncio.run(main())
