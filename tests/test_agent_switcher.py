"""Tests for active agent selection and persistence."""

import pytest

from core.agent_switcher import AgentSwitcher


@pytest.fixture
def switcher(services):
    return services.agents


class TestRestore:
    def test_nothing_detected(self, switcher, services):
        assert switcher.restore() is None
        assert services.registry.get_active_adapter() is None
        assert switcher.get_persisted_agent_id() is None

    def test_single_platform_is_detected_and_persisted(self, switcher, home):
        (home / ".codex").mkdir()
        adapter = switcher.restore()
        assert adapter.id == "codex"
        assert switcher.get_persisted_agent_id() == "codex"

    def test_several_platforms_are_not_guessed(self, switcher, home):
        (home / ".codex").mkdir()
        (home / ".claude").mkdir()
        assert switcher.restore() is None

    def test_persisted_choice_wins(self, switcher, services, home):
        (home / ".codex").mkdir()
        switcher.switch_agent("copilot")

        fresh = AgentSwitcher(services.registry, services.store)
        assert fresh.restore().id == "copilot"

    def test_unregistered_persisted_agent_falls_back(self, switcher, services, home):
        services.store.set("preferences", {"active_agent_id": "cursor"})
        (home / ".claude.json").write_text("{}", encoding="utf-8")

        assert switcher.restore().id == "claude-code"
        assert switcher.get_persisted_agent_id() == "claude-code"


class TestSwitch:
    def test_switch_notifies_listeners(self, switcher):
        seen = []
        switcher.add_listener(lambda adapter: seen.append(adapter.id if adapter else None))

        switcher.switch_agent("codex")
        switcher.clear_agent()

        assert seen == ["codex", None]
        assert switcher.get_persisted_agent_id() is None

    def test_failing_listener_does_not_stop_others(self, switcher):
        seen = []

        def broken(adapter):
            raise RuntimeError("boom")

        switcher.add_listener(broken)
        switcher.add_listener(seen.append)
        adapter = switcher.switch_agent("claude-code")

        assert seen == [adapter]

    def test_removed_listener_is_not_called(self, switcher):
        seen = []
        switcher.add_listener(seen.append)
        switcher.remove_listener(seen.append)
        switcher.switch_agent("codex")
        assert seen == []

    def test_unknown_agent(self, switcher):
        with pytest.raises(KeyError):
            switcher.switch_agent("cursor")
        assert switcher.get_persisted_agent_id() is None

    def test_preferences_keep_other_fields(self, switcher):
        preferences = switcher.load_preferences()
        preferences.dismiss("bundle-conversion")
        switcher.save_preferences(preferences)

        switcher.switch_agent("codex")

        assert switcher.load_preferences().is_dismissed("bundle-conversion")
