import os
import subprocess
import sys
import pytest

from bwplotter import cli
from bwplotter.asyncio_thread import ProducerThreadError
from bwplotter.constants import DEFAULT_URL
from bwplotter.exceptions import FontNotFoundError, WindowInitializationError
from bwplotter.gui import find_font_family
from tests.helpers import FakeRenderer


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.url == DEFAULT_URL
    assert args.output_file is None
    assert not args.debug


def test_parser_positionals():
    args = cli.build_parser().parse_args(["example.com/file.iso", "out.iso", "--debug"])
    assert args.url == "example.com/file.iso"
    assert args.output_file == "out.iso"
    assert args.debug


def test_window_failure_exits_negative(monkeypatch):
    def failing_gui(font):
        raise WindowInitializationError("no display")

    monkeypatch.setattr("bwplotter.cli.create_gui", failing_gui)
    assert cli.main([]) < 0


def test_missing_font_exits_negative(monkeypatch):
    def failing_gui(font):
        raise FontNotFoundError(("Visitor TT2 BRK",))

    monkeypatch.setattr("bwplotter.cli.create_gui", failing_gui)
    assert cli.main([]) < 0


def test_unwritable_output_exits_negative(monkeypatch):
    renderer = FakeRenderer()
    monkeypatch.setattr("bwplotter.cli.create_gui", lambda font: renderer)

    assert cli.main(["https://example.com/file.bin", os.path.join("missing_directory_for_test", "out.bin")]) < 0
    assert renderer.closed


def test_invalid_url_exits_negative(monkeypatch):
    renderer = FakeRenderer()
    monkeypatch.setattr("bwplotter.cli.create_gui", lambda font: renderer)

    assert cli.main(["ftp://example.com/file.bin"]) < 0
    assert renderer.closed


def test_invalid_ceiling_exits_negative():
    assert cli.main(["--initial-ceiling", "0"]) < 0


def test_find_font_family():
    assert find_font_family(["Arial", "courier"], ["Visitor TT2 BRK", "Courier"]) == "courier"
    with pytest.raises(FontNotFoundError) as exc_info:
        find_font_family(["Arial"], ["Courier"])
    assert exc_info.value.candidates == ("Courier",)


def test_stalled_producer_setup_exits_negative(monkeypatch):
    renderer = FakeRenderer()
    monkeypatch.setattr("bwplotter.cli.create_gui", lambda font: renderer)

    def stalled_setup(self, coro, timeout=30.0):
        coro.close()
        raise ProducerThreadError(f"Setup did not finish within {timeout} seconds")

    monkeypatch.setattr("bwplotter.asyncio_thread.AsyncioEventLoopThread.run_setup", stalled_setup)

    assert cli.main(["https://example.com/file.bin"]) < 0
    assert renderer.closed


def test_launcher_runs_from_checkout():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env = {k: v for k, v in os.environ.items() if k != "PYTHONPATH"}

    result = subprocess.run([sys.executable, "main.py", "--help"], cwd=root, env=env, capture_output=True, text=True, timeout=60)

    assert result.returncode == 0, result.stderr
    assert "bandwidth-plotter" in result.stdout
