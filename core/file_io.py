"""File I/O for agent config files.

Reads never raise for ordinary conditions: a missing file is reported as
``NOT_FOUND`` and unparseable content as ``ERROR`` with a readable message.
Writes are atomic (temp file in the same directory, then rename) and create
parent directories as needed.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

import tomlkit
from tomlkit.exceptions import TOMLKitError

from utils.jsonc import dumps_pretty, loads_lenient

logger = logging.getLogger(__name__)


class ReadStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class ConfigReadResult:
    """Outcome of reading one config file."""

    status: ReadStatus
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ReadStatus.OK

    @property
    def not_found(self) -> bool:
        return self.status == ReadStatus.NOT_FOUND


def atomic_write(path: Path, content: str) -> None:
    """Write file atomically to avoid partial/corrupt writes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        Path(tmp_path).replace(path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def is_toml_path(path: Path) -> bool:
    return path.suffix.lower() == ".toml"


class FileIO:
    """Format-aware reading and atomic writing of config files."""

    def read_text_file(self, path: Path) -> Optional[str]:
        """Return file content, or None when the file does not exist."""
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def read_json_file(self, path: Path) -> ConfigReadResult:
        """
        Read a JSON (or JSONC) document.

        Args:
            path: File to read

        Returns:
            ConfigReadResult with parsed data on success
        """
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ConfigReadResult(ReadStatus.NOT_FOUND)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return ConfigReadResult(ReadStatus.ERROR, error=f"Cannot read file: {e}")

        if not content.strip():
            return ConfigReadResult(ReadStatus.OK, data={})

        try:
            return ConfigReadResult(ReadStatus.OK, data=loads_lenient(content))
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in {path}: {e}")
            return ConfigReadResult(ReadStatus.ERROR, error=f"Invalid JSON: {e}")

    def read_toml_file(self, path: Path) -> ConfigReadResult:
        """Read a TOML document, keeping formatting via tomlkit."""
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ConfigReadResult(ReadStatus.NOT_FOUND)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return ConfigReadResult(ReadStatus.ERROR, error=f"Cannot read file: {e}")

        try:
            return ConfigReadResult(ReadStatus.OK, data=tomlkit.parse(content))
        except TOMLKitError as e:
            logger.warning(f"Invalid TOML in {path}: {e}")
            return ConfigReadResult(ReadStatus.ERROR, error=f"Invalid TOML: {e}")

    def read_config(self, path: Path) -> ConfigReadResult:
        """Dispatch on the file extension."""
        if is_toml_path(path):
            return self.read_toml_file(path)
        return self.read_json_file(path)

    def write_json_file(self, path: Path, data: Any) -> None:
        atomic_write(path, dumps_pretty(data))
        logger.debug(f"Wrote JSON: {path}")

    def write_toml_file(self, path: Path, data: Any) -> None:
        atomic_write(path, tomlkit.dumps(data))
        logger.debug(f"Wrote TOML: {path}")

    def write_config(self, path: Path, data: Any) -> None:
        if is_toml_path(path):
            self.write_toml_file(path, data)
        else:
            self.write_json_file(path, data)

    def write_text_file(self, path: Path, content: str) -> None:
        atomic_write(path, content)
        logger.debug(f"Wrote text: {path}")

    def file_exists(self, path: Path) -> bool:
        return path.exists()

    def list_directories(self, path: Path) -> List[Path]:
        """List immediate subdirectories, sorted by name. Missing path gives []."""
        if not path.is_dir():
            return []
        return sorted((p for p in path.iterdir() if p.is_dir()), key=lambda p: p.name)

    def list_files(self, path: Path, recursive: bool = False) -> List[Path]:
        """List regular files under ``path``, sorted. Missing path gives []."""
        if not path.is_dir():
            return []
        pattern = path.rglob("*") if recursive else path.iterdir()
        return sorted(p for p in pattern if p.is_file())
