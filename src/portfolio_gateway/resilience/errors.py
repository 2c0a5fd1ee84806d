"""
Error Taxonomy.

Every failure the gateway knows about is a ``GatewayError``. The
``status_code`` attribute is what the transport reports when the error
reaches the dispatcher boundary.

Propagation:
    - UpstreamFailure / InsufficientResults: swallowed by resolvers,
      converted into a lower-provenance success
    - UnknownCommand / InvalidPayload: surfaced to the caller
    - PersistenceFailure: aborts a screening run
    - StreamFailure: terminates a live chat stream
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500


class UpstreamFailure(GatewayError):
    """Non-success response or transport error from an external source."""

    status_code = 502

    def __init__(
        self,
        source: str,
        detail: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.source = source
        self.detail = detail
        self.upstream_status = status_code
        suffix = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{source}: {detail}{suffix}")


class InsufficientResults(UpstreamFailure):
    """A screen returned fewer entries than its viability threshold."""

    def __init__(self, screen: str, found: int, minimum: int) -> None:
        self.screen = screen
        self.found = found
        self.minimum = minimum
        super().__init__(
            screen, f"returned {found} entries, minimum is {minimum}"
        )


class UnknownCommand(GatewayError):
    """Requested command is not in the registry."""

    status_code = 400

    def __init__(self, command: object) -> None:
        self.command = command
        super().__init__(f"Unknown command: {command}")


class InvalidPayload(GatewayError):
    """A handler rejected the shape of its payload."""

    status_code = 400

    def __init__(self, command: str, detail: str) -> None:
        self.command = command
        self.detail = detail
        super().__init__(f"Invalid payload for {command}: {detail}")


class PersistenceFailure(GatewayError):
    """The batched cache write could not complete."""


class StreamFailure(GatewayError):
    """A live stream terminated abnormally mid-transmission."""
