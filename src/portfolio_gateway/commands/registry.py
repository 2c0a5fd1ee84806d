"""
Command Registry - Closed Command-to-Handler Map.

Handlers are registered once while the application is wired, then the
registry is frozen. Freezing checks that every CommandName has exactly one
handler; after that the registry is read-only.

Usage:
    registry = CommandRegistry()
    registry.register(CommandName.GET_RISK_FREE_RATE, handler)
    ...
    registry.freeze()

    info = registry.get("getRiskFreeRate")
    result = await info.handler(payload)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Type, Union

from pydantic import BaseModel

from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.payloads import parse_payload
from portfolio_gateway.domain.entities import ResultEnvelope
from portfolio_gateway.resilience.errors import UnknownCommand
from portfolio_gateway.resilience.tiered_resolver import TieredResolver

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class CommandInfo:
    """Metadata about a registered command."""

    name: CommandName
    handler: CommandHandler
    streaming: bool = False


class CommandRegistry:
    """Thread-safe registry, frozen before the first request."""

    def __init__(self) -> None:
        self._pending: Dict[CommandName, CommandInfo] = {}
        self._commands: Mapping[CommandName, CommandInfo] = MappingProxyType(self._pending)
        self._lock = RLock()
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        name: CommandName,
        handler: CommandHandler,
        streaming: bool = False,
    ) -> None:
        """
        Register the handler of one command.

        Raises:
            RuntimeError: If the registry is already frozen
            ValueError: If the command already has a handler
        """
        with self._lock:
            if self._frozen:
                raise RuntimeError(f"Registry is frozen; cannot register {name.value}")
            if name in self._commands:
                raise ValueError(f"Command '{name.value}' is already registered.")
            self._pending[name] = CommandInfo(name, handler, streaming)
            logger.debug(f"Registered command: {name.value}")

    def register_all(
        self,
        handlers: Mapping[CommandName, Union[CommandHandler, CommandInfo]],
    ) -> None:
        for name, entry in handlers.items():
            if isinstance(entry, CommandInfo):
                self.register(name, entry.handler, entry.streaming)
            else:
                self.register(name, entry)

    def freeze(self) -> "CommandRegistry":
        """
        Close the registry.

        Raises:
            ValueError: If some CommandName has no handler
        """
        with self._lock:
            missing = [n.value for n in CommandName if n not in self._commands]
            if missing:
                raise ValueError(f"Commands without a handler: {', '.join(missing)}")
            self._commands = MappingProxyType(dict(self._pending))
            self._frozen = True
            logger.info(f"Command registry frozen with {len(self._commands)} commands")
        return self

    def get(self, name: Any) -> CommandInfo:
        """
        Look up a command by wire name.

        Raises:
            UnknownCommand: If the name is not a registered command
        """
        command = CommandName.parse(name)
        info = self._commands.get(command)
        if info is None:
            raise UnknownCommand(name)
        return info

    def list_all(self) -> Dict[str, CommandInfo]:
        with self._lock:
            return {name.value: info for name, info in self._commands.items()}

    def __contains__(self, name: object) -> bool:
        try:
            self.get(name)
        except UnknownCommand:
            return False
        return True

    def __len__(self) -> int:
        return len(self._commands)


def resolver_handler(
    command: CommandName,
    payload_model: Type[BaseModel],
    resolver: TieredResolver[Any, Any],
) -> CommandHandler:
    """Handler that validates the payload and resolves it through ``resolver``."""

    async def handle(payload: Any) -> ResultEnvelope[Any]:
        params = parse_payload(command.value, payload_model, payload)
        return await resolver.resolve(params)

    handle.__name__ = f"handle_{command.value}"
    return handle
