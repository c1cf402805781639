"""Pytest fixtures for toolkeeper tests."""

import pytest

from core.services import build_services


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Fake home directory; VS Code's user dir resolves under it."""
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def services(home, workspace, tmp_path):
    """Fully wired services with every path inside tmp_path."""
    return build_services(
        home=home,
        workspace_root=workspace,
        state_file=tmp_path / "state" / "state.json",
        backup_root=tmp_path / "backups",
        managed_dir=tmp_path / "managed",
    )


@pytest.fixture
def claude(services):
    return services.registry.set_active_adapter("claude-code")


@pytest.fixture
def codex(services):
    return services.registry.set_active_adapter("codex")


@pytest.fixture
def copilot(services):
    return services.registry.set_active_adapter("copilot")
