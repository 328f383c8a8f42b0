"""Tests for the demo render script.

Tests cover:
- Command-line argument parsing
- Rendering a small demo image to a PNG file

The script's main() calls ti.init() itself, so these tests exercise
parse_args() and render_demo() directly under the session's Taichi runtime.
"""

import numpy as np


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_defaults(self):
        """Test the default render settings of the full-size demo."""
        from examples.render_demo import parse_args
        from pathtracer.scene.demo import DEMO_MAX_BOUNCES, DEMO_RESOLUTION, DEMO_SAMPLES

        args = parse_args([])

        assert (args.width, args.height) == DEMO_RESOLUTION
        assert args.samples == DEMO_SAMPLES
        assert args.max_bounces == DEMO_MAX_BOUNCES
        assert args.seed == 0
        assert args.output == "img.png"
        assert not args.quiet

    def test_overrides(self):
        """Test that every option can be overridden."""
        from examples.render_demo import parse_args

        args = parse_args(
            [
                "--width", "32",
                "--height", "24",
                "--samples", "4",
                "--max-bounces", "2",
                "--seed", "9",
                "--output", "out.png",
                "--quiet",
            ]
        )

        assert (args.width, args.height) == (32, 24)
        assert (args.samples, args.max_bounces, args.seed) == (4, 2, 9)
        assert args.output == "out.png"
        assert args.quiet


class TestRenderDemo:
    """Tests for render_demo."""

    def test_writes_png(self, tmp_path, capsys):
        """Test rendering a tiny demo image."""
        from examples.render_demo import render_demo
        from pathtracer.preview.export import load_png

        output = tmp_path / "demo.png"
        result = render_demo(
            width=8,
            height=6,
            samples=2,
            max_bounces=2,
            seed=1,
            output_path=str(output),
        )

        assert result == output
        image = load_png(output)
        assert image.shape == (6, 8, 3)
        assert image.dtype == np.uint8

        printed = capsys.readouterr().out
        assert "Beginning render..." in printed
        assert "8/8 columns" in printed

    def test_quiet_prints_nothing(self, tmp_path, capsys):
        """Test that quiet mode suppresses progress output."""
        from examples.render_demo import render_demo

        render_demo(
            width=4,
            height=4,
            samples=1,
            max_bounces=1,
            output_path=str(tmp_path / "quiet.png"),
            quiet=True,
        )

        assert capsys.readouterr().out == ""
