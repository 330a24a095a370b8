"""Click CLI commands for flightterrain."""

import asyncio
import logging

import click

from .builder import TerrainBuilder
from .constants import (
    DEFAULT_BUFFER_DISTANCE,
    DEFAULT_PREVIEW_EXTENT,
    DEFAULT_PREVIEW_RESOLUTION,
    DEFAULT_RESOLUTION,
    ELEVATION_API_URL,
    SAMPLE_TRACK,
)
from .elevation import OpenElevationProvider
from .exceptions import InputError
from .export import load_track, write_height_field, write_scene, write_track
from .models import TrackPoint
from .terrain import preview_height_field

logger = logging.getLogger(__name__)

_positive = click.FloatRange(min=0, min_open=True)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """flightterrain CLI for turning drone flight tracks into terrain scenes."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument('track_file', type=click.Path(dir_okay=False))
@click.option('--output', '-o', default='scene.json', help='Output scene JSON path')
@click.option('--buffer', '-b', 'buffer_distance', type=_positive,
              default=DEFAULT_BUFFER_DISTANCE, show_default=True,
              help='Buffer distance around the path (m)')
@click.option('--resolution', '-r', type=_positive, default=DEFAULT_RESOLUTION,
              show_default=True, help='Terrain sample spacing (m)')
@click.option('--snap', is_flag=True, help='Snap samples to the resolution lattice')
@click.option('--offline', is_flag=True, help='Skip the elevation service, use simulated terrain')
@click.option('--elevation-url', default=ELEVATION_API_URL, show_default=True,
              help='Elevation lookup endpoint')
def build(track_file: str, output: str, buffer_distance: float, resolution: float,
          snap: bool, offline: bool, elevation_url: str):
    """Build a terrain scene from a JSON or CSV flight track."""
    try:
        track = load_track(track_file)
    except InputError as e:
        raise click.ClickException(str(e))
    if not track:
        raise click.ClickException(f"No track points in {track_file}")

    provider = OpenElevationProvider(url=None if offline else elevation_url)
    try:
        builder = TerrainBuilder(provider, buffer_distance=buffer_distance,
                                 resolution=resolution, snap=snap)
        scene = asyncio.run(builder.build(track))
    finally:
        provider.close()

    write_scene(scene, output)

    click.echo(f"Scene written to {output}")
    click.echo(f"  path points: {len(scene.path)}")
    click.echo(f"  outline vertices: {len(scene.outline)}")
    if scene.terrain is None:
        click.echo("  terrain: skipped")
    else:
        rows, cols = scene.terrain.shape
        click.echo(f"  terrain: {cols}x{rows} ({scene.elevation.status.value})")
    if scene.notice:
        click.echo(f"Warning: {scene.notice}", err=True)


@cli.command()
@click.option('--output', '-o', default='track.json', help='Output track JSON path')
def sample(output: str):
    """Write the built-in sample flight track."""
    track = [TrackPoint(lat, lon, alt) for lat, lon, alt in SAMPLE_TRACK]
    write_track(track, output)
    click.echo(f"Sample track ({len(track)} points) written to {output}")


@cli.command()
@click.option('--output', '-o', default='preview.json', help='Output height field JSON path')
@click.option('--resolution', '-r', type=_positive, default=DEFAULT_PREVIEW_RESOLUTION,
              show_default=True, help='Cell size (m)')
@click.option('--extent', '-e', type=_positive, default=DEFAULT_PREVIEW_EXTENT,
              show_default=True, help='Half-width of the preview square (m)')
def preview(output: str, resolution: float, extent: float):
    """Write a synthetic preview terrain field."""
    field = preview_height_field(resolution=resolution, extent=extent)
    write_height_field(field, output)
    rows, cols = field.shape
    click.echo(f"Preview terrain ({cols}x{rows}) written to {output}")
