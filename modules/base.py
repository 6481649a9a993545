"""Base class for modules plugged into the leaderboard core."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from core.core import CommandHandler, Core


logger = logging.getLogger("leaderboard.modules")


class BaseModule:
    """Default lifecycle and command bookkeeping that modules extend."""

    name = "base"

    def __init__(self) -> None:
        self.core: Optional[Core] = None
        self._command_map: Dict[str, CommandHandler] = {}

    @property
    def attached(self) -> bool:
        return self.core is not None

    # Lifecycle -----------------------------------------------------------
    def attach(self, core: Core) -> None:
        self.core = core
        self._command_map = self.build_command_map() or {}

    def start(self) -> None:  # pragma: no cover - default no-op
        pass

    def stop(self) -> None:
        self.core = None

    # Command registration ------------------------------------------------
    def build_command_map(self) -> Dict[str, CommandHandler]:
        """Modules override to declare commands -> handlers."""
        return {}

    def get_command_map(self) -> Dict[str, CommandHandler]:
        return dict(self._command_map)

    # Events --------------------------------------------------------------
    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Broadcast through the core; detached modules only log the event."""
        if self.core is None:
            logger.debug({"evt": "event_dropped", "module": self.name, "type": event_type})
            return
        self.core.broadcast(event_type, payload)
