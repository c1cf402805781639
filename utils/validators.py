"""Input validation for paths and imported MCP server definitions."""

import os
import re
from pathlib import Path
from typing import Tuple
from urllib.parse import urlparse

from models.bundle import McpServerConfig

DANGEROUS_COMMAND_CHARS = [";", "&", "|", "`", "$", "(", ")", "<", ">", "\n", "\r"]
INJECTION_PATTERNS = [
    r";\s*\w",
    r"&&",
    r"\|\|",
    r"`",
    r"\$\(",
]


def validate_workspace_root(path: str) -> Tuple[bool, str]:
    """
    Validate a workspace directory.

    Args:
        path: Path to validate; environment variables and ``~`` are expanded

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or path.strip() == "":
        return False, "Path cannot be empty"

    try:
        expanded_path = os.path.expanduser(os.path.expandvars(path))
        path_obj = Path(expanded_path)

        if not path_obj.exists():
            return False, f"Path does not exist: {expanded_path}"

        if not path_obj.is_dir():
            return False, f"Path is not a directory: {expanded_path}"

        if not os.access(path_obj, os.R_OK):
            return False, f"Path is not readable: {expanded_path}"

        return True, ""

    except (ValueError, OSError) as e:
        return False, f"Invalid path: {str(e)}"


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Validate an HTTP/HTTPS URL.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or url.strip() == "":
        return False, "URL cannot be empty"

    result = urlparse(url)
    if not result.scheme:
        return False, "URL must have a scheme (http:// or https://)"
    if not result.netloc:
        return False, "URL must have a host"
    if result.scheme not in ["http", "https"]:
        return False, f"URL scheme must be http or https, got: {result.scheme}"

    return True, ""


def validate_command(command: str, args: list) -> Tuple[bool, str]:
    """
    Reject launch commands that smuggle shell syntax.

    Args:
        command: Executable of a stdio MCP server
        args: Its arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not command or command.strip() == "":
        return False, "Command cannot be empty"

    for char in DANGEROUS_COMMAND_CHARS:
        if char in command:
            return False, f"Command contains dangerous character: {char}"

    for arg in args:
        if not isinstance(arg, str):
            return False, f"Argument must be a string, got: {type(arg).__name__}"
        for pattern in INJECTION_PATTERNS:
            if re.search(pattern, arg):
                return False, f"Argument contains potential injection pattern: {pattern}"

    return True, ""


def validate_mcp_server_config(config: McpServerConfig) -> Tuple[bool, str]:
    """An imported server needs a safe command or a valid URL."""
    if config.url:
        return validate_url(config.url)
    if config.command:
        return validate_command(config.command, list(config.args))
    return False, "MCP server needs a command or a url"
