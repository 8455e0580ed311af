"""
Height to PNG Conversion CLI Commands for PyFastWave

Command line interface for converting saved water surfaces to PNG format.

Author: B.G.
"""

import sys

import click
import numpy as np
from PIL import Image


def height_to_image_data(height, uint=False, vmin=None, vmax=None):
    """
    Normalise a height array into PNG-ready integer data.

    Args:
        height: 2D array of heights (NaN allowed)
        uint: If True produce uint8 data, otherwise uint16
        vmin, vmax: Optional fixed normalisation range (default: data range)

    Returns:
        tuple: (image data, PIL mode, vmin, vmax)
    """
    height = np.asarray(height, dtype=np.float64)
    if height.ndim != 2:
        raise ValueError(f"Expected a 2D array, got shape {height.shape}")

    lo = float(np.nanmin(height)) if vmin is None else float(vmin)
    hi = float(np.nanmax(height)) if vmax is None else float(vmax)

    if hi <= lo:
        normalized = np.zeros_like(height)
    else:
        normalized = np.clip((height - lo) / (hi - lo), 0.0, 1.0)
    normalized = np.nan_to_num(normalized, nan=0.0)

    if uint:
        return (normalized * 255).astype(np.uint8), "L", lo, hi
    return (normalized * 65535).astype(np.uint16), "I;16", lo, hi


@click.command()
@click.argument("input_npy", type=click.Path(exists=True))
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    default=None,
    help="Output PNG filename (default: input name with .png extension)",
)
@click.option(
    "--uint",
    is_flag=True,
    default=False,
    help="Save as uint8 (0-255), otherwise save as uint16 (0-65535)",
)
@click.option("--vmin", type=float, default=None, help="Height mapped to black")
@click.option("--vmax", type=float, default=None, help="Height mapped to white")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def height2png(input_npy, output, uint, vmin, vmax, verbose):
    """
    Convert a saved water surface (.npy) to a grayscale PNG.

    INPUT_NPY: Path to a 2D numpy array, e.g. written by pfw-simulate

    Examples:

        # 16-bit PNG normalised to the data range
        pfw-height2png water.npy

        # 8-bit PNG with a fixed range for animation frames
        pfw-height2png frame_010.npy --uint --vmin 1.8 --vmax 2.2
    """
    try:
        if verbose:
            click.echo(f"Loading height from '{input_npy}'...")

        height = np.load(input_npy)

        if output is None:
            output = input_npy.rsplit(".", 1)[0] + ".png"

        img_data, mode, lo, hi = height_to_image_data(height, uint=uint, vmin=vmin, vmax=vmax)
        if hi <= lo:
            click.echo("Warning: height has constant values", err=True)

        img = Image.fromarray(img_data)

        if verbose:
            click.echo(f"Saving PNG to '{output}'...")

        img.save(output)

        if verbose:
            click.echo(f"Conversion completed! Mode: {mode}, Range: {lo}-{hi}")
        else:
            click.echo(f"Converted '{input_npy}' -> '{output}'")

    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    height2png()
