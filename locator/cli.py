"""Command-line interface for the location service."""

import asyncio

import click

from locator.core.config import settings
from locator.core.logging import configure_logging
from locator.location.accuracy import classify, describe_tier, get_profile
from locator.location.formatting import build_share_links, format_location_address
from locator.location.models import Coordinate
from locator.location.service import create_location_service


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """Marketplace location tools."""
    configure_logging(level="debug" if verbose else "warning", json_logs=False)


@cli.command()
@click.argument("lat", type=float)
@click.argument("lng", type=float)
@click.option("--proxy-url", default=None, help="Reverse geocoding proxy URL")
@click.option("--links", is_flag=True, help="Print map share links")
def resolve(lat: float, lng: float, proxy_url: str | None, links: bool):
    """Resolve a coordinate to a display address."""
    config = settings
    if proxy_url:
        config = settings.model_copy(update={"LOCATION_REVERSE_PROXY_URL": proxy_url})

    try:
        coordinate = Coordinate(latitude=lat, longitude=lng)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    async def run():
        service = create_location_service(config)
        try:
            return await service.resolve_manual(coordinate)
        finally:
            await service.aclose()

    resolved = asyncio.run(run())
    click.echo(format_location_address(resolved))
    click.echo(f"source: {resolved.source.value}")
    if links:
        for name, url in build_share_links(coordinate).items():
            click.echo(f"{name}: {url}")


@cli.command()
@click.argument("query")
def search(query: str):
    """Search known places by name or region."""
    service = create_location_service()
    places = service.search_places(query)
    if not places:
        click.echo(f"No places match '{query}'")
        return
    for place in places:
        click.echo(f"{place.display_address}\t{place.coordinate}")


@cli.command(name="classify")
@click.argument("precision", type=float)
@click.option(
    "--profile",
    "-p",
    type=click.Choice(["fast", "precise"]),
    default="precise",
    help="Acquisition profile",
)
def classify_command(precision: float, profile: str):
    """Classify a precision radius in meters."""
    tier = classify(precision, get_profile(profile))
    click.echo(f"{tier.value}: {describe_tier(tier)}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("locator.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
