"""Unit tests for project.files module."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest
import yaml

from localeweave.config import Configuration
from localeweave.exceptions import ConfigurationError, FileError, ParseError
from localeweave.project.files import FileHandler, JsonFileHandler, YamlFileHandler, get_file_handler


@pytest.fixture
def json_handler(make_config: Callable[..., Configuration], tmp_path: Path) -> JsonFileHandler:
    """JSON handler reading tmp_path/en.json and writing to tmp_path/out."""
    config = make_config(input_file=str(tmp_path / "en.json"), output_folder=str(tmp_path / "out"))
    return JsonFileHandler(config)


def write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_get_file_handler_by_extension(make_config: Callable[..., Configuration]) -> None:
    """The handler follows the input file extension."""
    assert isinstance(get_file_handler(make_config(input_file="en.json")), JsonFileHandler)
    assert isinstance(get_file_handler(make_config(input_file="en.yml")), YamlFileHandler)
    assert isinstance(get_file_handler(make_config(input_file="config/EN.YAML")), YamlFileHandler)


def test_get_file_handler_rejects_unknown(make_config: Callable[..., Configuration]) -> None:
    """Unsupported or missing input files are configuration errors."""
    with pytest.raises(ConfigurationError) as exc_info:
        get_file_handler(make_config(input_file="en.po"))
    assert exc_info.value.code == "unsupported_file_type"

    with pytest.raises(ConfigurationError):
        get_file_handler(make_config(input_file=None))


def test_source_strings_unwrap_language_root(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """A root key equal to the source language is unwrapped before flattening."""
    write_json(tmp_path / "en.json", {"en": {"home": {"title": "Welcome"}, "bye": "Bye"}})
    assert json_handler.get_source_strings() == {"home.title": "Welcome", "bye": "Bye"}


def test_source_strings_without_root(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """Files without a language root are flattened as they are."""
    write_json(tmp_path / "en.json", {"home": {"title": "Welcome"}})
    assert json_handler.get_source_strings() == {"home.title": "Welcome"}


def test_missing_file(json_handler: JsonFileHandler) -> None:
    """A missing source file raises FileError."""
    with pytest.raises(FileError):
        json_handler.get_source_strings()


def test_malformed_json(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """Invalid JSON raises ParseError."""
    (tmp_path / "en.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ParseError):
        json_handler.read(str(tmp_path / "en.json"))


def test_non_mapping_root(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """A top-level list is not a locale file."""
    write_json(tmp_path / "en.json", ["a"])  # type: ignore[arg-type]
    with pytest.raises(ParseError):
        json_handler.read(str(tmp_path / "en.json"))


def test_empty_file(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """An empty file reads as an empty tree."""
    (tmp_path / "en.json").write_text("  \n", encoding="utf-8")
    assert json_handler.read(str(tmp_path / "en.json")) == {}


def test_write_json_keeps_unicode(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """Output is indented UTF-8 JSON; missing folders are created."""
    path = json_handler.build_output_path("ja")
    assert path == str(tmp_path / "out" / "ja.json")

    json_handler.write(path, {"ja": {"greeting": "こんにちは"}})

    content = Path(path).read_text(encoding="utf-8")
    assert "こんにちは" in content
    assert json.loads(content) == {"ja": {"greeting": "こんにちは"}}
    assert not list((tmp_path / "out").glob("*.tmp"))


def test_build_output_path_without_folder(make_config: Callable[..., Configuration]) -> None:
    """Without an output folder the file goes to the working directory."""
    handler = JsonFileHandler(make_config(output_folder=None))
    assert handler.build_output_path("it") == "it.json"


def test_dry_run_skips_write(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """Nothing touches the disk in dry-run mode."""
    handler = JsonFileHandler(make_config(dry_run=True, output_folder=str(tmp_path / "out")))
    assert handler.write(handler.build_output_path("it"), {"it": {"a": "b"}}) is None
    assert not (tmp_path / "out").exists()


def test_backup_rotation(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """Existing output is backed up, keeping max_backups files."""
    handler = JsonFileHandler(make_config(output_folder=str(tmp_path), max_backups=3))
    path = Path(handler.build_output_path("it"))
    write_json(path, {"version": 0})

    for version in range(1, 5):
        handler.write(str(path), {"version": version})

    def version_of(name: str) -> int:
        return json.loads((tmp_path / name).read_text(encoding="utf-8"))["version"]

    assert version_of("it.json") == 4
    assert version_of("it.json.bak") == 3
    assert version_of("it.json.bak.1") == 2
    assert version_of("it.json.bak.2") == 1
    assert not (tmp_path / "it.json.bak.3").exists()


def test_no_backup_when_disabled(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """create_backup=False overwrites in place."""
    handler = JsonFileHandler(make_config(output_folder=str(tmp_path), create_backup=False))
    path = write_json(tmp_path / "it.json", {"version": 0})

    handler.write(str(path), {"version": 1})

    assert not (tmp_path / "it.json.bak").exists()


def test_no_backup_when_max_backups_is_zero(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """max_backups=0 keeps no backup even with create_backup on."""
    handler = JsonFileHandler(make_config(output_folder=str(tmp_path), create_backup=True, max_backups=0))
    path = write_json(tmp_path / "it.json", {"version": 0})

    handler.write(str(path), {"version": 1})

    assert json.loads(path.read_text(encoding="utf-8")) == {"version": 1}
    assert not list(tmp_path.glob("it.json.bak*"))


def test_file_handler_is_abstract(make_config: Callable[..., Configuration]) -> None:
    """The base handler cannot be used without a format."""
    with pytest.raises(TypeError):
        FileHandler(make_config())  # type: ignore[abstract]


def test_read_existing_translations(json_handler: JsonFileHandler, tmp_path: Path) -> None:
    """Existing output is unwrapped and flattened; a missing file is empty."""
    output = tmp_path / "it.json"
    assert json_handler.read_existing_translations(str(output), "it") == {}

    write_json(output, {"it": {"home": {"title": "Benvenuto"}}})
    assert json_handler.read_existing_translations(str(output), "it") == {"home.title": "Benvenuto"}


def test_yaml_round_trip(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """YAML files are read with their language root and written back as YAML."""
    source = tmp_path / "en.yml"
    source.write_text("en:\n  home:\n    title: Welcome\n  count: 3\n", encoding="utf-8")
    handler = YamlFileHandler(make_config(input_file=str(source), output_folder=str(tmp_path)))

    assert handler.get_source_strings() == {"home.title": "Welcome", "count": 3}

    path = handler.build_output_path("it")
    assert path.endswith("it.yml")
    handler.write(path, {"it": {"home": {"title": "Benvenuto"}}})
    assert yaml.safe_load(Path(path).read_text(encoding="utf-8")) == {"it": {"home": {"title": "Benvenuto"}}}


def test_malformed_yaml(make_config: Callable[..., Configuration], tmp_path: Path) -> None:
    """Invalid YAML raises ParseError."""
    source = tmp_path / "en.yml"
    source.write_text("en: [unclosed\n", encoding="utf-8")
    handler = YamlFileHandler(make_config(input_file=str(source)))

    with pytest.raises(ParseError):
        handler.get_source_strings()
