"""
Test suite for the command line interface.
"""

import json
import os
import subprocess
import sys

import pytest
from PIL import Image

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from main import main, output_paths, parse_arguments

# Import TestDataLoader from tests directory
tests_dir = os.path.dirname(__file__)
sys.path.append(tests_dir)
from test_data_loader import TestDataLoader

MAIN_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "main.py")


@pytest.mark.cli
class TestArguments:
    def test_defaults(self):
        args = parse_arguments(["words.json"])
        assert args.filenames == ["words.json"]
        assert args.dest == "."
        assert args.size is None
        assert args.font_file is None

    def test_layout_options(self):
        args = parse_arguments(
            ["--size", "800", "--steps", "50", "--seed", "7", "--repulsion", "-5", "a.json"]
        )
        assert (args.size, args.steps, args.seed, args.repulsion) == (800, 50, 7, -5)

    def test_filenames_are_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_output_paths_strip_json_extension(self):
        png_path, json_path = output_paths("data/words.json", "out")
        assert png_path == os.path.join("out", "words.output.png")
        assert json_path == os.path.join("out", "words.output.json")

    def test_output_paths_keep_other_extensions(self):
        png_path, _ = output_paths("words.txt", "out")
        assert png_path == os.path.join("out", "words.txt.output.png")


@pytest.mark.cli
class TestMain:
    def test_renders_file_into_dest(self, temp_dest_dir, quiet_output):
        dest = os.path.join(temp_dest_dir, "charts")

        status = main(
            [
                "--dest",
                dest,
                "--size",
                "300",
                "--font-family",
                "DejaVu Sans",
                TestDataLoader.WORDS_PATH,
            ]
        )

        assert status == 0
        with Image.open(os.path.join(dest, "words.output.png")) as image:
            assert image.size == (320, 320)
        with open(os.path.join(dest, "words.output.json"), "r", encoding="utf-8") as f:
            assert len(json.load(f)) == 30

    def test_invalid_configuration_exits_with_error(self, temp_dest_dir, quiet_output, capsys):
        status = main(
            [
                "--dest",
                temp_dest_dir,
                "--min-radius",
                "40",
                "--max-radius",
                "10",
                TestDataLoader.WORDS_PATH,
            ]
        )

        assert status == 1
        assert "Error: max_radius" in capsys.readouterr().out

    def test_missing_font_file_exits_with_error(self, temp_dest_dir, quiet_output, capsys):
        status = main(
            [
                "--dest",
                temp_dest_dir,
                "--font-file",
                os.path.join(temp_dest_dir, "missing.ttf"),
                TestDataLoader.WORDS_PATH,
            ]
        )

        assert status == 1
        assert capsys.readouterr().out.startswith("Error:")

    def test_failed_file_does_not_stop_others(self, temp_dest_dir, quiet_output, capsys):
        status = main(
            [
                "--dest",
                temp_dest_dir,
                "--size",
                "200",
                "--font-family",
                "DejaVu Sans",
                TestDataLoader.MALFORMED_PATH,
                TestDataLoader.WORDS_PATH,
            ]
        )

        output = capsys.readouterr().out
        assert status == 1
        assert f"Error rendering {TestDataLoader.MALFORMED_PATH}" in output
        assert os.path.exists(os.path.join(temp_dest_dir, "words.output.png"))
        assert not os.path.exists(os.path.join(temp_dest_dir, "malformed.output.png"))


@pytest.mark.cli
@pytest.mark.slow
class TestCommandLine:
    def test_script_renders_charts(self, temp_dest_dir):
        result = subprocess.run(
            [
                sys.executable,
                MAIN_PATH,
                "--quiet",
                "--dest",
                temp_dest_dir,
                "--size",
                "400",
                TestDataLoader.WORDS_PATH,
            ],
            capture_output=True,
            text=True,
            timeout=300,
        )

        assert result.returncode == 0, result.stdout + result.stderr
        assert os.path.exists(os.path.join(temp_dest_dir, "words.output.png"))
        assert os.path.exists(os.path.join(temp_dest_dir, "words.output.json"))

    def test_script_help(self):
        result = subprocess.run(
            [sys.executable, MAIN_PATH, "--help"],
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0
        assert "Bubble Chart Renderer" in result.stdout
        assert "--font-file" in result.stdout
