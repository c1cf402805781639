"""Tests for workspace profile associations and overrides."""

import pytest

from core.workspace_profile_manager import WorkspaceProfileManager, WorkspaceProfileStatus
from tests.helpers import read_json


@pytest.fixture
def manager(services):
    return services.workspaces


@pytest.fixture
def work(services):
    _, _, profile = services.profiles.create_profile("Work", [])
    return profile


class TestAssociation:
    def test_association_file_location(self, workspace):
        assert WorkspaceProfileManager.get_association_file(workspace) == workspace / ".toolkeeper" / "profile.json"

    def test_set_and_get(self, manager, workspace):
        assert manager.set_association(workspace, "Work") == (True, None)
        assert manager.get_association(workspace) == "Work"
        assert read_json(workspace / ".toolkeeper" / "profile.json") == {"profileName": "Work"}

    def test_set_keeps_other_fields(self, manager, workspace):
        path = workspace / ".toolkeeper" / "profile.json"
        path.parent.mkdir()
        path.write_text('{"profileName": "Old", "note": "team default"}', encoding="utf-8")

        manager.set_association(workspace, "Work")

        assert read_json(path) == {"profileName": "Work", "note": "team default"}

    @pytest.mark.parametrize("content", ["{ broken", '{"profileName": ""}', '["Work"]'])
    def test_invalid_file_means_no_association(self, manager, workspace, content):
        path = workspace / ".toolkeeper" / "profile.json"
        path.parent.mkdir()
        path.write_text(content, encoding="utf-8")
        assert manager.get_association(workspace) is None

    def test_remove(self, manager, workspace):
        manager.set_association(workspace, "Work")
        assert manager.remove_association(workspace) == (True, None)
        assert manager.get_association(workspace) is None
        assert manager.remove_association(workspace) == (True, None)


class TestStatus:
    def test_none(self, manager, workspace):
        assert manager.get_status(workspace) == WorkspaceProfileStatus.NONE

    def test_unknown_profile(self, manager, workspace):
        manager.set_association(workspace, "Ghost")
        assert manager.get_status(workspace) == WorkspaceProfileStatus.UNKNOWN_PROFILE

    def test_matched_and_mismatched(self, manager, services, workspace, work):
        manager.set_association(workspace, "Work")
        assert manager.get_status(workspace) == WorkspaceProfileStatus.MISMATCHED

        services.profiles.set_active_profile_id(work.id)
        assert manager.get_status(workspace) == WorkspaceProfileStatus.MATCHED

    def test_override(self, manager, services, workspace, work):
        services.profiles.create_profile("Home", [])
        manager.set_association(workspace, "Work")
        manager.set_override(workspace, "Home")

        assert manager.get_status(workspace) == WorkspaceProfileStatus.OVERRIDDEN
        entry = services.store.get("workspaceProfileOverrides")[str(workspace.resolve())]
        assert entry["manualProfileName"] == "Home"

    def test_override_to_no_profile(self, manager, workspace, work):
        manager.set_association(workspace, "Work")
        manager.set_override(workspace, None)
        assert manager.is_overridden(workspace) is True

    def test_stale_override_is_cleared(self, manager, services, workspace, work):
        _, _, home_profile = services.profiles.create_profile("Home", [])
        manager.set_association(workspace, "Work")
        manager.set_override(workspace, "Home")
        services.profiles.delete_profile(home_profile.id)

        assert manager.get_status(workspace) == WorkspaceProfileStatus.MISMATCHED
        assert services.store.get("workspaceProfileOverrides") == {}

    def test_association_clears_override(self, manager, workspace, work):
        manager.set_override(workspace, None)
        manager.set_association(workspace, "Work")
        assert manager.is_overridden(workspace) is False
