"""Central coordinator that routes named commands to leaderboard modules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

from .events import EventBus, event_bus as global_event_bus


logger = logging.getLogger("leaderboard.core")


class CommandHandler(Protocol):
    """Typed callable for command handlers."""

    def __call__(self, payload: Optional[Dict[str, Any]] = None) -> Any: ...


class Module(Protocol):
    """Protocol describing the interface the core expects from modules."""

    name: str

    def attach(self, core: "Core") -> None: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def get_command_map(self) -> Dict[str, CommandHandler]: ...


class UnknownCommandError(LookupError):
    """Raised by `Core.require` when no module handles a command."""


@dataclass
class CommandResult:
    """Standard response envelope returned by `Core.dispatch`."""

    command: str
    handled: bool
    payload: Optional[Any] = None


class Core:
    """Owns the registered modules, their command table and the event bus."""

    def __init__(
        self,
        modules: Optional[Iterable[Module]] = None,
        *,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.event_bus = event_bus or global_event_bus
        self._modules: Dict[str, Module] = {}
        self._command_registry: Dict[str, CommandHandler] = {}
        if modules:
            for module in modules:
                self.register_module(module)

    @property
    def modules(self) -> Dict[str, Module]:
        """Expose registered modules (read-only)."""
        return dict(self._modules)

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(sorted(self._command_registry))

    def register_module(self, module: Module) -> None:
        """Attach a module, bind its command handlers and start it."""
        if module.name in self._modules:
            raise ValueError(f"Module '{module.name}' already registered")
        module.attach(self)
        command_map = module.get_command_map()
        clashes = [command for command in command_map if command in self._command_registry]
        if clashes:
            raise ValueError(f"Command '{clashes[0]}' already bound")
        self._command_registry.update(command_map)
        self._modules[module.name] = module
        module.start()
        logger.info({"evt": "module_registered", "module": module.name, "commands": sorted(command_map)})

    def unregister_module(self, name: str) -> None:
        """Remove a module and its handlers."""
        module = self._modules.pop(name, None)
        if module is None:
            return
        for command in module.get_command_map():
            self._command_registry.pop(command, None)
        module.stop()
        logger.info({"evt": "module_unregistered", "module": name})

    def shutdown(self) -> None:
        """Stop and detach every registered module."""
        for name in list(self._modules):
            self.unregister_module(name)

    def dispatch(self, command: str, payload: Optional[Dict[str, Any]] = None) -> CommandResult:
        """Send a command into the system; handler exceptions propagate."""
        handler = self._command_registry.get(command)
        if handler is None:
            logger.warning({"evt": "command_unhandled", "command": command})
            return CommandResult(command=command, handled=False)
        result = handler(payload or {})
        return CommandResult(command=command, handled=True, payload=result)

    def require(self, command: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Dispatch and return the handler's payload, failing if unhandled."""
        result = self.dispatch(command, payload)
        if not result.handled:
            raise UnknownCommandError(f"No module handles '{command}'")
        return result.payload

    def broadcast(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Helper to publish events system-wide."""
        self.event_bus.publish(event_type, payload)


__all__ = ["Core", "CommandResult", "CommandHandler", "Module", "UnknownCommandError"]
