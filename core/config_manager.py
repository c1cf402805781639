"""Configuration Manager for agent tool config files.

The only component that mutates config files on disk. Handles:
- Schema-checked reads that report missing and unreadable files as statuses
- Read-modify-write with validation before anything is persisted
- Rolling backups before every write, delete and overwrite
- Atomic writes with rollback when the written file fails re-validation
- Multi-scope tool reads with precedence resolution
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import tomlkit

from core.adapter_registry import AdapterRegistry
from core.backup_manager import BackupManager
from core.errors import ConfigReadError, ConfigValidationError
from core.file_io import ConfigReadResult, FileIO, ReadStatus, is_toml_path
from core.schema_registry import SchemaRegistry, ValidationResult
from models.enums import ALL_SCOPES, SCOPE_PRECEDENCE, ConfigScope, ToolStatus, ToolType
from models.tool import NormalizedTool, ScopeEntry, ToolSource
from utils.constants import CONFIG_DIR
from utils.tool_key import canonical_key

logger = logging.getLogger(__name__)


def _plain(data: Any) -> Any:
    """Strip tomlkit wrappers so validators and parsers see plain dicts and lists."""
    unwrap = getattr(data, "unwrap", None)
    return unwrap() if callable(unwrap) else data


class ConfigManager:
    """Reads, validates and safely writes the config files adapters point at."""

    def __init__(
        self,
        registry: AdapterRegistry,
        schemas: Optional[SchemaRegistry] = None,
        file_io: Optional[FileIO] = None,
        backups: Optional[BackupManager] = None,
        backup_root: Optional[Path] = None,
    ):
        """
        Initialize the config manager.

        Args:
            registry: Adapter registry; its active adapter serves tool reads
            schemas: Schema registry used for every read and write
            file_io: Format-aware reader/writer
            backups: Rolling backup manager
            backup_root: Where removed directories are copied before deletion
        """
        self.registry = registry
        self.schemas = schemas or SchemaRegistry()
        self.file_io = file_io or FileIO()
        self.backups = backups or BackupManager()
        self.backup_root = backup_root or CONFIG_DIR / "backups"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, schema_key: str, data: Any) -> ValidationResult:
        return self.schemas.validate(schema_key, _plain(data))

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_config_file(self, path: Path, schema_key: str) -> ConfigReadResult:
        """
        Read and validate a config file.

        Args:
            path: File to read (``.toml`` or JSON/JSONC)
            schema_key: Registered schema the document must satisfy

        Returns:
            ConfigReadResult; ``not_found`` for a missing file, ``error`` when the
            file cannot be parsed or fails validation
        """
        result = self.file_io.read_config(path)
        if not result.ok:
            return result

        data = _plain(result.data)
        validation = self.validate(schema_key, data)
        if not validation.success:
            detail = "Schema validation failed: " + "; ".join(validation.errors)
            logger.warning(f"{path}: {detail}")
            return ConfigReadResult(ReadStatus.ERROR, error=detail)
        return ConfigReadResult(ReadStatus.OK, data=data)

    def read_tools_by_scope(self, tool_type: ToolType, scope: ConfigScope) -> List[NormalizedTool]:
        """Tools of one type from one scope, without scope resolution."""
        adapter = self.registry.get_active_adapter()
        if adapter is None:
            return []
        return adapter.read_tools(tool_type, scope)

    def read_all_tools(self, tool_type: ToolType) -> List[NormalizedTool]:
        """
        Read every scope of the active adapter and resolve duplicates.

        A failure in one scope becomes an Error-status tool for that scope;
        the other scopes are still returned.
        """
        adapter = self.registry.get_active_adapter()
        if adapter is None:
            return []

        tools: List[NormalizedTool] = []
        for scope in ALL_SCOPES:
            try:
                tools.extend(adapter.read_tools(tool_type, scope))
            except Exception as e:
                logger.error(f"Failed to read {tool_type.value} tools in {scope.value} scope: {e}")
                tools.append(NormalizedTool(
                    id=f"{tool_type.value}:{scope.value}:error",
                    type=tool_type,
                    name=f"Error reading {scope.value} {tool_type.value}",
                    scope=scope,
                    status=ToolStatus.ERROR,
                    status_detail=str(e),
                    source=ToolSource(file_path=Path()),
                ))

        return self.resolve_scopes(tools)

    @staticmethod
    def resolve_scopes(tools: List[NormalizedTool]) -> List[NormalizedTool]:
        """
        Collapse tools sharing a canonical key into the highest-precedence one.

        Every sighting is recorded in the winner's ``scope_entries``. Error
        placeholders have no identity and pass through untouched.
        """
        groups: Dict[str, List[NormalizedTool]] = {}
        resolved: List[Any] = []
        for tool in tools:
            if tool.status == ToolStatus.ERROR:
                resolved.append(tool)
                continue
            key = canonical_key(tool)
            if key not in groups:
                groups[key] = []
                resolved.append(key)
            groups[key].append(tool)

        result = []
        for item in resolved:
            if isinstance(item, NormalizedTool):
                result.append(item)
                continue
            group = sorted(groups[item], key=lambda t: SCOPE_PRECEDENCE.index(t.scope))
            winner = group[0]
            winner.scope_entries = [
                ScopeEntry(scope=t.scope, status=t.status, file_path=t.source.file_path, is_active=t is winner)
                for t in group
            ]
            result.append(winner)
        return result

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @staticmethod
    def _empty_document(path: Path) -> Any:
        return tomlkit.document() if is_toml_path(path) else {}

    def write_config_file(self, path: Path, schema_key: str, mutate: Callable[[Any], Any]) -> Any:
        """
        Read-modify-write a config file.

        The file is re-read, handed to ``mutate`` (which may edit in place
        and return None), validated, backed up and written atomically. The
        written file is validated again and rolled back if that fails.
        JSON files are re-serialized, so comments in JSONC files are lost;
        TOML goes through tomlkit and keeps them.

        Args:
            path: Config file to change; created when missing
            schema_key: Schema the mutated document must satisfy
            mutate: Callable receiving the current document

        Returns:
            The written document as plain data

        Raises:
            ConfigReadError: If the existing file cannot be parsed
            ConfigValidationError: If the mutated document is invalid
        """
        current = self.file_io.read_config(path)
        if current.status == ReadStatus.ERROR:
            raise ConfigReadError(path, current.error)

        document = current.data if current.ok else self._empty_document(path)
        updated = mutate(document)
        if updated is None:
            updated = document

        validation = self.validate(schema_key, updated)
        if not validation.success:
            logger.error(f"Refusing to write {path}: {validation.errors}")
            raise ConfigValidationError(path, schema_key, validation.errors)

        self._write_with_rollback(path, lambda: self._write_and_verify(path, schema_key, updated))
        logger.info(f"Config written: {path}")
        return _plain(updated)

    def _write_and_verify(self, path: Path, schema_key: str, document: Any) -> None:
        self.file_io.write_config(path, document)
        written = self.file_io.read_config(path)
        if not written.ok:
            raise ConfigReadError(path, written.error or "file vanished after write")
        check = self.validate(schema_key, written.data)
        if not check.success:
            raise ConfigValidationError(path, schema_key, check.errors)

    def _write_with_rollback(self, path: Path, write: Callable[[], None]) -> None:
        """
        Back up ``path``, run ``write`` and restore the original bytes if it fails.
        """
        snapshot = path.read_bytes() if path.is_file() else None
        self.backups.create_backup(path)

        try:
            write()
        except Exception as e:
            logger.error(f"Write to {path} failed, rolling back: {e}")
            if snapshot is not None:
                path.write_bytes(snapshot)
                logger.info(f"{path} rolled back successfully")
            elif path.exists():
                path.unlink()
            raise

    def write_text_file(self, path: Path, content: str) -> None:
        """Replace a text file (skill, command, agent) after backing it up."""
        self._write_with_rollback(path, lambda: self.file_io.write_text_file(path, content))

    def rename_path(self, source: Path, target: Path) -> None:
        """Rename a file or directory; used by suffix-based enable/disable."""
        if target.exists():
            raise FileExistsError(f"Cannot rename {source.name}: {target} already exists")
        source.rename(target)
        logger.info(f"Renamed {source} -> {target.name}")

    def remove_path(self, path: Path) -> None:
        """Delete a file or directory, keeping a backup copy first."""
        if path.is_dir():
            self.backups.backup_directory(path, self.backup_root)
            shutil.rmtree(path)
        elif path.exists():
            self.backups.create_backup(path)
            path.unlink()
        else:
            logger.debug(f"Nothing to remove at {path}")
            return
        logger.info(f"Removed {path}")

    def copy_path(self, source: Path, target: Path) -> None:
        """Copy a tool file or directory to another location, replacing what is there."""
        if source.is_dir():
            if target.exists():
                self.backups.backup_directory(target, self.backup_root)
                shutil.rmtree(target)
            shutil.copytree(source, target)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            self.backups.create_backup(target)
            shutil.copy2(source, target)
        logger.info(f"Copied {source} -> {target}")

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def list_backups(self, path: Path) -> List[Path]:
        return self.backups.list_backups(path)

    def restore_backup(self, path: Path, number: int = 1) -> bool:
        """Put backup ``number`` back in place, backing up the current file first."""
        if not self.backups.backup_path(path, number).exists():
            return False
        snapshot = self.backups.backup_path(path, number).read_bytes()
        self._write_with_rollback(path, lambda: path.write_bytes(snapshot))
        logger.info(f"Restored {path} from backup {number}")
        return True
