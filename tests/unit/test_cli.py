"""Unit tests for CLI functionality."""

import numpy as np
import pytest
from click.testing import CliRunner
from PIL import Image


class TestCLICommands:
    """Test CLI simulation and conversion commands."""

    @pytest.fixture
    def runner(self):
        """Provide Click test runner."""
        return CliRunner()

    @pytest.mark.unit
    def test_simulate_help(self, runner):
        from pyfastwave.cli.simulate_commands import simulate

        result = runner.invoke(simulate, ["--help"])
        assert result.exit_code == 0
        assert "Run a water scenario" in result.output

    @pytest.mark.unit
    def test_height2png_help(self, runner):
        from pyfastwave.cli.height2png_commands import height2png

        result = runner.invoke(height2png, ["--help"])
        assert result.exit_code == 0
        assert "Convert a saved water surface" in result.output

    @pytest.mark.unit
    def test_height2png_requires_args(self, runner):
        from pyfastwave.cli.height2png_commands import height2png

        result = runner.invoke(height2png, [])
        assert result.exit_code != 0

    @pytest.mark.unit
    def test_height2png_conversion(self, runner, tmp_path):
        from pyfastwave.cli.height2png_commands import height2png

        data = np.linspace(1.0, 2.0, 32, dtype=np.float32).reshape(4, 8)
        in_path = tmp_path / "surface.npy"
        np.save(in_path, data)

        result = runner.invoke(height2png, [str(in_path), "--uint"])
        assert result.exit_code == 0
        out_path = tmp_path / "surface.png"
        assert out_path.exists()
        img = np.array(Image.open(out_path))
        assert img.shape == (4, 8)
        assert img.min() == 0 and img.max() == 255

    @pytest.mark.unit
    def test_height2png_constant_warning(self, runner, tmp_path):
        from pyfastwave.cli.height2png_commands import height2png

        in_path = tmp_path / "flat.npy"
        np.save(in_path, np.full((4, 4), 2.0))
        out_path = tmp_path / "flat16.png"

        result = runner.invoke(height2png, [str(in_path), "-o", str(out_path)])
        assert result.exit_code == 0
        assert out_path.exists()

    @pytest.mark.unit
    def test_height_to_image_data_range(self):
        from pyfastwave.cli.height2png_commands import height_to_image_data

        data, mode, lo, hi = height_to_image_data(
            np.array([[0.0, 1.0], [2.0, np.nan]]), vmin=0.0, vmax=1.0
        )
        assert mode == "I;16"
        assert (lo, hi) == (0.0, 1.0)
        assert data.dtype == np.uint16
        assert data[0, 1] == 65535 and data[1, 0] == 65535 and data[1, 1] == 0
        with pytest.raises(ValueError):
            height_to_image_data(np.zeros(4))

    @pytest.mark.unit
    @pytest.mark.slow
    def test_simulate_small_run(self, runner, tmp_path):
        from pyfastwave.cli.simulate_commands import simulate

        out = tmp_path / "water.npy"
        png = tmp_path / "water.png"
        result = runner.invoke(
            simulate,
            [
                "--arch", "cpu", "--nx", "16", "--ny", "16", "--frames", "2",
                "--bump-radius", "2", "-o", str(out), "--png", str(png),
            ],
        )
        assert result.exit_code == 0, result.output
        surface = np.load(out)
        assert surface.shape == (16, 16)
        assert np.all(np.isfinite(surface))
        assert png.exists()

    @pytest.mark.unit
    def test_simulate_rejects_non_power_of_two(self, runner, tmp_path):
        from pyfastwave.cli.simulate_commands import simulate

        result = runner.invoke(
            simulate,
            ["--arch", "cpu", "--nx", "24", "--ny", "16", "--frames", "1", "-o", str(tmp_path / "w.npy")],
        )
        assert result.exit_code == 1

    @pytest.mark.unit
    def test_simulate_releases_fields_on_failure(self, runner, tmp_path, monkeypatch):
        from pyfastwave import Simulator
        from pyfastwave.cli.simulate_commands import simulate

        released = []
        original = Simulator.destroy

        def tracking_destroy(sim):
            released.append(sim)
            original(sim)

        monkeypatch.setattr(Simulator, "destroy", tracking_destroy)

        out = tmp_path / "missing_dir" / "w.npy"
        result = runner.invoke(
            simulate,
            ["--arch", "cpu", "--nx", "16", "--ny", "16", "--frames", "1", "-o", str(out)],
        )
        assert result.exit_code == 1
        assert len(released) == 1
        assert released[0].store is None
