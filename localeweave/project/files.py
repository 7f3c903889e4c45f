"""
Locale file handlers.

This module handles reading source locale files and writing translated ones:
- JSON and YAML formats
- Source language root unwrapping ({"en": {...}} -> {...})
- Atomic file writing with rotating backups
- Dry-run mode (nothing is written)
"""

import json
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Type

import yaml

from localeweave.config import Configuration
from localeweave.exceptions import ConfigurationError, FileError, ParseError
from localeweave.logger import get_logger
from localeweave.translation import validator
from localeweave.translation.utils import flatten

logger = get_logger(__name__)

MAX_BACKUP_SLOTS = 10


class FileHandler(ABC):
    """Base locale file handler; subclasses implement parsing and dumping."""

    extension = ""
    format_name = ""

    def __init__(self, config: Configuration):
        self.config = config

    @abstractmethod
    def _load(self, content: str) -> Any:
        """Parse file content."""

    @abstractmethod
    def _dump(self, data: Dict[str, Any]) -> str:
        """Serialize a tree to file content."""

    def read(self, file_path: str) -> Dict[str, Any]:
        """
        Read and parse a locale file.

        Args:
            file_path: Path of the file

        Returns:
            Parsed tree (empty dict for an empty file)

        Raises:
            FileError: If the file is missing or unreadable
            ParseError: If the content is malformed or not a mapping
        """
        validator.validate_file_exists(file_path)

        try:
            content = Path(file_path).read_text(encoding='utf-8')
        except OSError as e:
            raise FileError(f"Cannot read file: {file_path}", code="file_unreadable",
                            context={"file_path": str(file_path), "error": str(e)}) from e

        if not content.strip():
            return {}

        try:
            data = self._load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ParseError(f"Invalid {self.format_name} syntax in {file_path}", code="parse_error",
                             context={"file_path": str(file_path), "error": str(e)}) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ParseError(f"{file_path} must contain a mapping at the top level", code="parse_error",
                             context={"file_path": str(file_path)})
        return data

    def write(self, file_path: str, data: Dict[str, Any]) -> Optional[Path]:
        """
        Write a tree to a locale file.

        The file is written atomically (temp file + rename). An existing file
        is backed up first when create_backup is set. In dry-run mode nothing
        is written.

        Returns:
            Path written, or None in dry-run mode

        Raises:
            FileError: If the file cannot be written
        """
        output_path = Path(file_path)
        if self.config.dry_run:
            logger.info(f"[dry run] Would write {len(flatten(data))} keys to {output_path}")
            return None

        try:
            if self.config.create_backup and self.config.max_backups >= 1 and output_path.exists():
                self._create_backup(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(output_path, self._dump(data))
        except OSError as e:
            raise FileError(f"Failed to write {self.format_name}: {output_path}", code="file_write_failed",
                            context={"file_path": str(output_path), "error": str(e)}) from e

        logger.info(f"Wrote {output_path}")
        return output_path

    def get_source_strings(self) -> Dict[str, Any]:
        """
        Read the input file and flatten it.

        A top-level key equal to the source language is unwrapped.

        Returns:
            Flat mapping of dotted keys to leaf values
        """
        if not self.config.input_file:
            raise ConfigurationError("Input file must be set", code="input_file_missing")

        source_data = self.read(self.config.input_file)
        source_data = _unwrap_language(source_data, self.config.source_language)
        return flatten(source_data)

    def read_existing_translations(self, file_path: str, target_lang_code: str) -> Dict[str, Any]:
        """
        Flat view of a previously written output file.

        Returns:
            Flat mapping, empty when the file does not exist yet
        """
        if not Path(file_path).exists():
            return {}
        existing = self.read(file_path)
        return flatten(_unwrap_language(existing, target_lang_code))

    def build_output_path(self, target_lang_code: str) -> str:
        file_name = f"{target_lang_code}.{self.extension}"
        if not self.config.output_folder:
            return file_name
        return str(Path(self.config.output_folder) / file_name)

    def _create_backup(self, file_path: Path) -> None:
        primary_backup = file_path.with_name(f"{file_path.name}.bak")
        if self.config.max_backups > 1 and primary_backup.exists():
            self._rotate_backups(file_path, primary_backup)
        shutil.copy2(file_path, primary_backup)
        logger.debug(f"Backed up {file_path} to {primary_backup}")

    def _rotate_backups(self, file_path: Path, primary_backup: Path) -> None:
        """Shift .bak -> .bak.1 -> .bak.2 ..., keeping max_backups files in total."""
        def numbered(i: int) -> Path:
            return file_path.with_name(f"{file_path.name}.bak.{i}")

        for i in range(MAX_BACKUP_SLOTS, self.config.max_backups - 2, -1):
            if i >= 1 and numbered(i).exists():
                numbered(i).unlink()

        for i in range(self.config.max_backups - 2, 0, -1):
            if numbered(i).exists():
                numbered(i).replace(numbered(i + 1))

        primary_backup.replace(numbered(1))


class JsonFileHandler(FileHandler):
    extension = "json"
    format_name = "JSON"

    def _load(self, content):
        return json.loads(content)

    def _dump(self, data):
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class YamlFileHandler(FileHandler):
    extension = "yml"
    format_name = "YAML"

    def _load(self, content):
        return yaml.safe_load(content)

    def _dump(self, data):
        return yaml.safe_dump(data, allow_unicode=True, sort_keys=False, default_flow_style=False)


HANDLERS_BY_SUFFIX: Dict[str, Type[FileHandler]] = {
    ".json": JsonFileHandler,
    ".yml": YamlFileHandler,
    ".yaml": YamlFileHandler,
}


def get_file_handler(config: Configuration) -> FileHandler:
    """
    Pick the handler matching the input file extension.

    Raises:
        ConfigurationError: If the input file is missing or has an unsupported extension
    """
    if not config.input_file:
        raise ConfigurationError("Input file must be set", code="input_file_missing")

    suffix = Path(config.input_file).suffix.lower()
    handler_class = HANDLERS_BY_SUFFIX.get(suffix)
    if handler_class is None:
        raise ConfigurationError(
            f"Unsupported input file type: {suffix or config.input_file}",
            code="unsupported_file_type",
            context={"input_file": config.input_file, "supported": sorted(HANDLERS_BY_SUFFIX)},
        )
    return handler_class(config)


def _unwrap_language(data: Dict[str, Any], language_code: Optional[str]) -> Dict[str, Any]:
    if language_code and isinstance(data.get(language_code), dict):
        return data[language_code]
    return data


def _atomic_write(output_path: Path, content: str) -> None:
    """Write content to a temp file in the target directory, then rename over the target."""
    fd, temp_path = tempfile.mkstemp(dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.replace(temp_path, output_path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
