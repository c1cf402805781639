"""Platform-specific directory lookups."""

import os
import sys
from pathlib import Path
from typing import Optional

SUPPORTED_PLATFORMS = ("darwin", "linux", "win32")


def get_platform() -> str:
    """Return the current platform, narrowed to darwin/linux/win32."""
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in SUPPORTED_PLATFORMS:
        return sys.platform
    raise RuntimeError(f"Unsupported platform: {sys.platform}")


def get_managed_config_dir(home: Optional[Path] = None) -> Path:
    """
    Return the OS-specific directory holding organization-managed Claude Code config.

    - macOS: ~/Library/Application Support/ClaudeCode
    - Linux: /etc/claude-code
    - Windows: C:\\ProgramData\\ClaudeCode
    """
    home = home or Path.home()
    platform = get_platform()
    if platform == "darwin":
        return home / "Library" / "Application Support" / "ClaudeCode"
    if platform == "win32":
        return Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData")) / "ClaudeCode"
    return Path("/etc/claude-code")


def get_vscode_user_dir(home: Optional[Path] = None) -> Path:
    """Return the VS Code user settings directory for the current platform."""
    home = home or Path.home()
    platform = get_platform()
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Code" / "User"
    if platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / "Code" / "User"
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else home / ".config"
    return base / "Code" / "User"
