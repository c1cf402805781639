"""Active agent selection: restores, switches and persists the chosen platform."""

import logging
from typing import Callable, List, Optional

from adapters.base import PlatformAdapter
from core.adapter_registry import AdapterRegistry
from core.state_store import StateStore
from models.preferences import Preferences
from utils.constants import PREFERENCES_KEY

logger = logging.getLogger(__name__)

AgentListener = Callable[[Optional[PlatformAdapter]], None]


class AgentSwitcher:
    """
    Owns the switching flow: updates the registry, persists the choice in
    the preferences and tells listeners (watchers, views) about it.
    """

    def __init__(self, registry: AdapterRegistry, store: StateStore):
        self.registry = registry
        self.store = store
        self._listeners: List[AgentListener] = []

    def add_listener(self, listener: AgentListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AgentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, adapter: Optional[PlatformAdapter]) -> None:
        for listener in list(self._listeners):
            try:
                listener(adapter)
            except Exception as e:
                logger.error(f"Agent switch listener failed: {e}")

    def load_preferences(self) -> Preferences:
        data = self.store.get(PREFERENCES_KEY, {})
        return Preferences.from_dict(data if isinstance(data, dict) else {})

    def save_preferences(self, preferences: Preferences) -> None:
        self.store.set(PREFERENCES_KEY, preferences.to_dict())

    def get_persisted_agent_id(self) -> Optional[str]:
        return self.load_preferences().active_agent_id

    def restore(self) -> Optional[PlatformAdapter]:
        """
        Re-activate the last chosen agent.

        Falls back to auto-detection when nothing was persisted or the
        persisted agent is no longer registered.
        """
        agent_id = self.get_persisted_agent_id()
        if agent_id and self.registry.get_adapter(agent_id) is not None:
            adapter = self.registry.set_active_adapter(agent_id)
        else:
            if agent_id:
                logger.warning(f"Persisted agent '{agent_id}' is not available, detecting instead")
            adapter = self.registry.detect_and_activate()
            if adapter is not None:
                self._persist(adapter.id)

        self._notify(adapter)
        return adapter

    def switch_agent(self, agent_id: str) -> PlatformAdapter:
        """
        Make ``agent_id`` the active agent.

        Raises:
            KeyError: If no adapter with that id is registered
        """
        adapter = self.registry.set_active_adapter(agent_id)
        self._persist(agent_id)
        self._notify(adapter)
        return adapter

    def clear_agent(self) -> None:
        """Forget the persisted choice; the registry keeps its current adapter."""
        self._persist(None)
        self._notify(None)

    def _persist(self, agent_id: Optional[str]) -> None:
        preferences = self.load_preferences()
        preferences.active_agent_id = agent_id
        self.save_preferences(preferences)
