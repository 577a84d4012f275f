"""CLI commands for census-query."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import click

from census_query import CensusClient, Query
from census_query.data.datasets import DATASETS
from census_query.errors import CensusQueryError


@click.group()
@click.version_option(package_name="census-query")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the installed key and cache (default: ~/.census-query)",
)
@click.option("--verbose", is_flag=True, help="Log HTTP requests")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], verbose: bool):
    """Census-query: query the Census data API."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"data_dir": data_dir}


def _parse_summary_level(value: str) -> Union[str, Dict[str, str]]:
    """Parse "county" or "county:037"."""
    if ":" in value:
        level, code = value.split(":", 1)
        return {level: code}
    return value


def _parse_container(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse ("state:06", "county:037") into a mapping."""
    container = {}
    for value in values:
        if ":" not in value:
            raise click.BadParameter(f"Expected LEVEL:CODE, got '{value}'", param_hint="--in")
        level, code = value.split(":", 1)
        container[level] = code
    return container


def _split_variables(variables: Tuple[str, ...]) -> List[str]:
    """Accept both repeated -v options and comma-separated lists."""
    result = []
    for v in variables:
        result.extend(name for name in v.split(",") if name)
    return result


def _build_query(
    variables: Tuple[str, ...],
    level: str,
    container: Tuple[str, ...],
    key: Optional[str],
) -> Query:
    query = Query().get(*_split_variables(variables)).for_(_parse_summary_level(level))
    if container:
        query.in_(_parse_container(container))
    if key:
        query.key(key)
    return query


def query_options(f):
    """Options shared by commands that build a query."""
    f = click.option("--key", "-k", help="API key (default: installed key)")(f)
    f = click.option(
        "--in",
        "container",
        multiple=True,
        help="Containing geography as LEVEL:CODE (can be specified multiple times)",
    )(f)
    f = click.option(
        "--for",
        "level",
        default="us",
        show_default=True,
        help="Summary level as LEVEL or LEVEL:CODE",
    )(f)
    f = click.option(
        "--variables",
        "-v",
        multiple=True,
        required=True,
        help="Variables to request (can be specified multiple times)",
    )(f)
    f = click.option("--year", "-y", type=int, help="Dataset vintage (default: newest)")(f)
    f = click.argument("dataset", type=click.Choice(sorted(DATASETS)))(f)
    return f


@cli.command()
@query_options
@click.option("--output", "-o", type=click.Path(), help="Write to CSV or Parquet file")
@click.option("--progress", is_flag=True, help="Show a progress bar over chunks")
@click.pass_context
def query(
    ctx: click.Context,
    dataset: str,
    year: Optional[int],
    variables: Tuple[str, ...],
    level: str,
    container: Tuple[str, ...],
    key: Optional[str],
    output: Optional[str],
    progress: bool,
):
    """Query a dataset and print the result as CSV."""
    q = _build_query(variables, level, container, key)
    year = year or DATASETS[dataset].newest_year
    asyncio.run(_query_async(ctx.obj["data_dir"], dataset, year, q, output, progress))


async def _query_async(
    data_dir: Optional[Path],
    dataset: str,
    year: int,
    q: Query,
    output: Optional[str],
    progress: bool,
):
    """Async implementation of query command."""
    client = CensusClient(data_dir=data_dir)

    try:
        result = await client.query(dataset, year, q, show_progress=progress)
    except CensusQueryError as e:
        raise click.ClickException(str(e))
    finally:
        await client.close()

    df = result.to_dataframe()
    if output is None:
        click.echo(df.to_csv(index=False), nl=False)
        return

    output_path = Path(output)
    if output_path.suffix == ".parquet":
        df.to_parquet(output_path)
    else:
        df.to_csv(output_path, index=False)
    click.echo(f"Wrote {len(df)} rows x {len(df.columns)} columns -> {output}")


@cli.command()
@query_options
@click.pass_context
def url(
    ctx: click.Context,
    dataset: str,
    year: Optional[int],
    variables: Tuple[str, ...],
    level: str,
    container: Tuple[str, ...],
    key: Optional[str],
):
    """Print the request URL for a query without sending it."""
    q = _build_query(variables, level, container, key)
    client = CensusClient(data_dir=ctx.obj["data_dir"])
    try:
        click.echo(client.api_url(dataset, year or DATASETS[dataset].newest_year, q))
    except CensusQueryError as e:
        raise click.ClickException(str(e))


@cli.command()
def datasets():
    """List known datasets and their vintages."""
    click.echo("\nAvailable datasets:")
    click.echo("=" * 60)
    for dataset_id, info in DATASETS.items():
        years = f"{min(info.valid_years)}-{info.newest_year}"
        click.echo(f"{dataset_id:14s} {years:10s} {info.description}")


@cli.command("install-key")
@click.argument("key")
@click.pass_context
def install_key(ctx: click.Context, key: str):
    """Install an API key for queries that do not specify one."""
    client = CensusClient(data_dir=ctx.obj["data_dir"])
    client.install_key(key)
    click.echo(f"Key installed at {client.key_store.path}")


@cli.command("uninstall-key")
@click.pass_context
def uninstall_key(ctx: click.Context):
    """Remove the installed API key."""
    client = CensusClient(data_dir=ctx.obj["data_dir"])
    if client.key_store.remove_installed_key():
        click.echo("Key removed.")
    else:
        click.echo("No key installed.")


if __name__ == "__main__":
    cli()
