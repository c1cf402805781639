"""Registry of platform adapters and the currently active one."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from adapters.base import PlatformAdapter
from utils.constants import ERROR_MESSAGES

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """
    Holds every registered adapter, keyed by id.

    Activation is explicit: either by id, or through ``detect_and_activate``
    which only picks an adapter when exactly one platform is installed.
    """

    def __init__(self):
        self._adapters: Dict[str, PlatformAdapter] = {}
        self._active_id: Optional[str] = None

    def register(self, adapter: PlatformAdapter) -> None:
        """Register an adapter, replacing any existing one with the same id."""
        if adapter.id in self._adapters:
            logger.debug(f"Replacing adapter '{adapter.id}'")
        self._adapters[adapter.id] = adapter

    def get_adapter(self, adapter_id: str) -> Optional[PlatformAdapter]:
        return self._adapters.get(adapter_id)

    def get_active_adapter(self) -> Optional[PlatformAdapter]:
        if self._active_id is None:
            return None
        return self._adapters.get(self._active_id)

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    def set_active_adapter(self, adapter_id: str) -> PlatformAdapter:
        """
        Activate a registered adapter.

        Raises:
            KeyError: If no adapter with that id is registered
        """
        adapter = self._adapters.get(adapter_id)
        if adapter is None:
            raise KeyError(ERROR_MESSAGES["UNKNOWN_AGENT"].format(agent_id=adapter_id))
        self._active_id = adapter_id
        logger.info(f"Active agent: {adapter.display_name}")
        return adapter

    def detect_and_activate(self) -> Optional[PlatformAdapter]:
        """
        Activate the single installed platform.

        Returns:
            The activated adapter, or None when zero or several platforms were detected
        """
        detected = []
        for adapter in self._adapters.values():
            try:
                if adapter.detect():
                    detected.append(adapter)
            except OSError as e:
                logger.warning(f"Detection failed for {adapter.id}: {e}")

        if len(detected) == 1:
            return self.set_active_adapter(detected[0].id)

        logger.info(f"Detected {len(detected)} agent platforms; not auto-activating")
        return None

    def get_all_adapters(self) -> List[PlatformAdapter]:
        return list(self._adapters.values())

    def set_workspace_root(self, workspace_root: Optional[Path]) -> None:
        """Point every adapter at the open workspace (or none)."""
        for adapter in self._adapters.values():
            adapter.set_workspace_root(workspace_root)
