import logging
from pathlib import Path

import pytest

from wikigallery import cli
from wikigallery.config import DEFAULT_START_URL
from wikigallery.utils import accept_all


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_bare_invocation_defaults_to_crawl():
    args = cli.parse_args([])
    assert args.command == "crawl"
    assert args.start_url == DEFAULT_START_URL
    assert args.max_workers is None


def test_leading_flags_are_treated_as_crawl():
    args = cli.parse_args(["--resolution", "1024x576", "--delay", "0.5"])
    assert args.command == "crawl"
    assert args.resolution == "1024x576"
    assert args.delay == 0.5


def test_build_config_maps_arguments():
    args = cli.parse_args(["crawl", "--output", "out", "--timeout", "10", "--max-workers", "4"])
    config = cli.build_config(args)
    assert config.download_dir == Path("out")
    assert (config.connect_timeout, config.read_timeout) == (10.0, 10.0)
    assert config.max_workers == 4
    assert config.image_filter is accept_all


def test_build_config_with_resolution_filter():
    config = cli.build_config(cli.parse_args(["--resolution", "1024x576"]))
    assert config.image_filter("/images/Bg_1024x576.png")
    assert not config.image_filter("/images/Bg.png")


def test_rename_command_defaults_to_img():
    args = cli.parse_args(["rename"])
    assert args.command == "rename"
    assert args.directory == Path("img")


def test_rename_prompts_and_renames(tmp_path, monkeypatch, capsys):
    (tmp_path / "b.jpg").write_text("b")
    (tmp_path / "A.png").write_text("a")
    monkeypatch.setattr("builtins.input", lambda prompt: "y")

    assert cli.main(["rename", str(tmp_path)]) == 0

    assert sorted(p.name for p in tmp_path.iterdir()) == ["001.png", "002.jpg"]
    assert "A.png -> 001.png" in capsys.readouterr().out


def test_rename_declined_at_prompt(tmp_path, monkeypatch):
    (tmp_path / "b.jpg").write_text("b")
    monkeypatch.setattr("builtins.input", lambda prompt: "nope")

    assert cli.main(["rename", str(tmp_path)]) == 0
    assert [p.name for p in tmp_path.iterdir()] == ["b.jpg"]


def test_rename_missing_directory_fails(tmp_path):
    assert cli.main(["rename", str(tmp_path / "missing")]) == 1


@pytest.mark.parametrize("value", ["0", "-2", "many"])
def test_max_workers_must_be_positive(value, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["crawl", "--max-workers", value])
    assert excinfo.value.code == 2
    assert "--max-workers" in capsys.readouterr().err
