"""
PackSmith CLI - Command-line interface for optimizing resource packs
"""

import logging
import shutil
import sys
import time
from pathlib import Path

import click

from packsmith import __version__, optimize_pack
from packsmith.exceptions import PackError
from packsmith.texturing.rect_packer import MAX_ATLAS_SIZE


def format_duration(seconds: float) -> str:
    """Format a duration as '<ms>ms (<s.s>s)'."""
    return f"{int(seconds * 1000)}ms ({seconds:.1f}s)"


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    PackSmith - Shrink resource pack textures.

    Examples:
        packsmith optimize my_pack my_pack_optimized
    """
    pass


@cli.command()
@click.argument('input_dir')
@click.argument('output_dir')
@click.option('--workers', '-j', default=1, show_default=True, type=click.IntRange(min=1),
              help='Texture groups processed in parallel')
@click.option('--max-atlas-size', default=MAX_ATLAS_SIZE, show_default=True, type=click.IntRange(min=16),
              help='Largest allowed atlas side in pixels')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed optimization info')
def optimize(input_dir, output_dir, workers, max_atlas_size, verbose):
    """
    Copy a resource pack and optimize the textures of the copy.

    OUTPUT_DIR is deleted first if it exists.

    Examples:
        packsmith optimize pack pack_out
        packsmith optimize pack pack_out --workers 4 -v
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s: %(message)s")

    input_path = Path(input_dir)
    output_path = Path(output_dir)

    start_all = time.perf_counter()
    delete_duration = None
    copy_duration = 0.0
    optimize_duration = 0.0

    try:
        if not input_path.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")

        click.echo("Copying resourcepack...")
        if output_path.exists():
            t0 = time.perf_counter()
            shutil.rmtree(output_path)
            delete_duration = time.perf_counter() - t0

        t1 = time.perf_counter()
        shutil.copytree(input_path, output_path)
        copy_duration = time.perf_counter() - t1

        t2 = time.perf_counter()
        report = optimize_pack(input_path, output_path, workers=workers, max_atlas_size=max_atlas_size)
        optimize_duration = time.perf_counter() - t2

        for failure in report.failed:
            click.secho(f"  Failed: {failure.texture}: {failure.error}", fg='yellow', err=True)
        click.secho(f"✓ Optimized {report.optimized_count} of {report.groups_found} textures", fg='green')

    except FileNotFoundError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)
    except (PackError, OSError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)
    except Exception as e:
        click.secho(f"Unexpected error: {e}", fg='red', err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    finally:
        total = time.perf_counter() - start_all
        click.echo("Timings:")
        click.echo(f"  delete:   {format_duration(delete_duration) if delete_duration is not None else 'skipped'}")
        click.echo(f"  copy:     {format_duration(copy_duration)}")
        click.echo(f"  optimize: {format_duration(optimize_duration)}")
        click.echo(f"  total:    {format_duration(total)}")


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
