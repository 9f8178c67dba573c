"""Tests for the command-line interface.

Tests cover:
- Argument parsing and validation
- Rendering a scene file end to end
- Exit codes and error reporting of main()
"""

from pathlib import Path

import pytest

SCENE_TEXT = """\
NEAR 1
LEFT -1
RIGHT 1
BOTTOM -1
TOP 1
RES 8 6
SPHERE ball 0 0 -5 1 1 1 1 0 0 0.2 0.8 0.5 0 20
LIGHT key 0 0 10 1 1 1
BACK 0 0 1
AMBIENT 1 1 1
OUTPUT ball.ppm
"""


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "ball.txt"
    path.write_text(SCENE_TEXT)
    return path


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults(self):
        """Test default option values."""
        from whitted.cli import parse_args

        args = parse_args(["scene.txt"])

        assert args.scene == "scene.txt"
        assert args.output is None
        assert args.max_depth is None
        assert args.arch == "cpu"
        assert not args.quiet
        assert not args.verbose

    def test_all_options(self):
        """Test that every option is parsed."""
        from whitted.cli import parse_args

        args = parse_args(
            ["scene.txt", "--output", "out.png", "--max-depth", "5", "--arch", "gpu", "--quiet"]
        )

        assert args.output == "out.png"
        assert args.max_depth == 5
        assert args.arch == "gpu"
        assert args.quiet

    def test_negative_depth_rejected(self):
        """Test that a negative recursion limit exits with a usage error."""
        from whitted.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args(["scene.txt", "--max-depth", "-1"])

    def test_scene_required(self):
        """Test that the scene argument is mandatory."""
        from whitted.cli import parse_args

        with pytest.raises(SystemExit):
            parse_args([])


class TestRenderSceneFile:
    """Tests for render_scene_file."""

    def test_default_output_is_scene_output_in_cwd(self, scene_file, tmp_path, monkeypatch):
        """Test that the OUTPUT name is resolved against the working directory."""
        from whitted.cli import render_scene_file

        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        written = render_scene_file(str(scene_file), quiet=True)

        assert written == Path("ball.ppm")
        assert (workdir / "ball.ppm").read_bytes().startswith(b"P6\n8 6\n255\n")

    def test_explicit_output(self, scene_file, tmp_path):
        """Test writing to an explicit output path."""
        from whitted.cli import render_scene_file

        target = tmp_path / "explicit.png"
        written = render_scene_file(str(scene_file), output_path=str(target), quiet=True)

        assert written == target
        assert target.exists()

    def test_progress_output(self, scene_file, tmp_path, capsys):
        """Test that progress is printed unless quiet."""
        from whitted.cli import render_scene_file

        render_scene_file(str(scene_file), output_path=str(tmp_path / "out.ppm"))
        out = capsys.readouterr().out

        assert "8x6, 1 spheres, 1 lights" in out
        assert "Saved to:" in out

    def test_max_depth_passed_through(self, scene_file, tmp_path):
        """Test that max_depth 0 produces a black image."""
        from PIL import Image as PILImage

        from whitted.cli import render_scene_file

        target = tmp_path / "black.png"
        render_scene_file(str(scene_file), output_path=str(target), max_depth=0, quiet=True)

        with PILImage.open(target) as img:
            assert img.getextrema() == ((0, 0), (0, 0), (0, 0))

    def test_missing_scene_file(self, tmp_path):
        """Test that a missing scene file raises FileNotFoundError."""
        from whitted.cli import render_scene_file

        with pytest.raises(FileNotFoundError):
            render_scene_file(str(tmp_path / "missing.txt"), quiet=True)


class TestMain:
    """Tests for the main entry point's exit codes."""

    @pytest.fixture(autouse=True)
    def skip_taichi_init(self, monkeypatch):
        """Keep main() from re-initializing the session's Taichi runtime."""
        monkeypatch.setattr("whitted.cli.ti.init", lambda *args, **kwargs: None)

    def test_success_returns_zero(self, scene_file, tmp_path):
        """Test that a good scene renders and returns 0."""
        from whitted.cli import main

        target = tmp_path / "ok.ppm"
        assert main([str(scene_file), "--output", str(target), "--quiet"]) == 0
        assert target.read_bytes().startswith(b"P6\n8 6\n255\n")

    def test_missing_scene_returns_one(self, tmp_path, capsys):
        """Test that a missing scene file is reported on stderr."""
        from whitted.cli import main

        assert main([str(tmp_path / "missing.txt"), "--quiet"]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_malformed_scene_returns_one(self, tmp_path, capsys):
        """Test that a short SPHERE line is reported with its location."""
        from whitted.cli import main

        path = tmp_path / "bad.txt"
        path.write_text("RES 4 4\nSPHERE x 1\n")

        assert main([str(path), "--quiet"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error:")
        assert f"{path}:2:" in err
