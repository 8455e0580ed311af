"""
Water Simulation CLI Commands for PyFastWave

Command line interface running a water scenario and saving its final state.

Author: B.G.
"""

import sys

import click
import numpy as np
import taichi as ti


def _init_taichi(arch):
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            return
        except Exception:
            click.echo("Warning: GPU initialisation failed, falling back to CPU", err=True)
    ti.init(arch=ti.cpu)


def _save_preview(path, surface, terrain, title):
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(6, 5))
    wet = np.ma.masked_where(surface <= terrain, surface)
    ax.imshow(terrain, cmap="gist_earth", origin="upper")
    im = ax.imshow(wet, cmap="Blues_r", origin="upper")
    fig.colorbar(im, ax=ax, label="water surface")
    ax.set_title(title)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)


@click.command()
@click.option("--nx", type=int, default=128, show_default=True, help="Grid columns (power of two)")
@click.option("--ny", type=int, default=128, show_default=True, help="Grid rows (power of two)")
@click.option("--frames", type=int, default=60, show_default=True, help="Number of simulate() calls")
@click.option("--dt", type=float, default=1.0 / 60.0, show_default=True, help="Time step per frame")
@click.option("--level", type=float, default=2.0, show_default=True, help="Still water level")
@click.option("--bump-amplitude", type=float, default=0.3, show_default=True, help="Central bump height (0 disables)")
@click.option("--bump-radius", type=float, default=4.0, show_default=True, help="Central bump radius in cells")
@click.option("--beach", is_flag=True, default=False, help="Use a sloping beach terrain instead of a flat floor")
@click.option("--chop", type=float, default=0.0, show_default=True, help="Amplitude of red-noise surface chop")
@click.option("--seed", type=int, default=42, show_default=True, help="Seed of the surface chop")
@click.option("--grid-scale", type=float, default=1.0, show_default=True, help="Cell size in world units")
@click.option("--max-dt", type=float, default=0.25, show_default=True, help="Largest sub-step")
@click.option("--height-scale", type=float, default=10.0, show_default=True, help="Display height scale")
@click.option("--base-level", type=float, default=0.0, show_default=True, help="Display base level")
@click.option("--world", is_flag=True, default=False, help="Save world-space displacement instead of raw height")
@click.option("-o", "--output", type=click.Path(), default="water.npy", show_default=True, help="Output .npy file")
@click.option("--png", type=click.Path(), default=None, help="Optional matplotlib preview image")
@click.option("--arch", type=click.Choice(["cpu", "gpu"]), default="gpu", show_default=True, help="Taichi backend")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output and stage timings")
def simulate(
    nx,
    ny,
    frames,
    dt,
    level,
    bump_amplitude,
    bump_radius,
    beach,
    chop,
    seed,
    grid_scale,
    max_dt,
    height_scale,
    base_level,
    world,
    output,
    png,
    arch,
    verbose,
):
    """
    Run a water scenario and save the final surface.

    The scenario is a lake at rest at LEVEL over a flat floor (or a sloping
    beach), optionally disturbed by a central Gaussian bump and red-noise
    chop, advanced for FRAMES calls of simulate(DT).

    Examples:

        # Ripple spreading on a flat lake
        pfw-simulate --frames 120 -o ripple.npy

        # Chop breaking on a beach, with a preview image
        pfw-simulate --beach --level 0 --bump-amplitude 0 --chop 0.05 --png beach.png

        # World-space displacement for a renderer
        pfw-simulate --world --height-scale 10 --base-level -5
    """
    sim = None
    try:
        import pyfastwave as pw

        _init_taichi(arch)

        config = pw.WaveConfig(grid_scale=grid_scale, max_dt=max_dt)
        display = pw.DisplayParams(
            world_scale=(nx * grid_scale, ny * grid_scale),
            height_scale=height_scale,
            base_level=base_level,
        )

        if beach:
            terrain = pw.scenarios.beach_terrain(nx, ny, depth=max(level, 0.0) + 4.0)
        else:
            terrain = np.zeros((ny, nx), dtype=np.float32)
        height = pw.scenarios.lake_over_terrain(terrain, level)

        wet = height > terrain
        if chop != 0.0:
            height = height + np.where(wet, pw.scenarios.red_noise(nx, ny, amplitude=chop, seed=seed), 0.0)
            height = np.maximum(height, terrain)

        if verbose:
            click.echo(f"Building {nx}x{ny} simulation ({int(wet.sum())} wet cells)...")

        sim = pw.Simulator(nx, ny, config=config, terrain=terrain, height=height, display=display)
        sim.verbose = verbose

        if bump_amplitude != 0.0:
            sim.add_local_perturbation(nx / 2, ny / 2, bump_radius, bump_amplitude)

        for frame in range(frames):
            sim.simulate(dt)
            if verbose and (frame + 1) % max(frames // 10, 1) == 0:
                click.echo(f"Frame {frame + 1}/{frames}, t = {sim.time:.3f} s")

        surface = sim.get_height()
        result = sim.display.to_world(surface) if world else surface
        np.save(output, result.astype(np.float32))

        if png is not None:
            _save_preview(png, surface, sim.get_terrain(), f"t = {sim.time:.2f} s")

        if verbose:
            sim.print_timings()
            click.echo(f"Range: {float(result.min())}-{float(result.max())}")

        click.echo(f"Simulated {frames} frames ({sim.n_steps} sub-steps) -> '{output}'")

    except ValueError as e:
        click.echo(f"Error: Invalid parameters - {e}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    finally:
        if sim is not None:
            sim.destroy()


if __name__ == "__main__":
    simulate()
