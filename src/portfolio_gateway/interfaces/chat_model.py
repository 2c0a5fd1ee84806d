"""
Chat Model Protocol.

Defines the abstract interface for the LLM chat backend. Chat is live-only:
there is no cached or static fallback for a conversation.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Protocol, runtime_checkable


@runtime_checkable
class ChatModel(Protocol):
    """Abstract interface for a streaming chat backend."""

    def stream(
        self,
        message: str,
        history: List[Dict[str, Any]],
    ) -> AsyncIterator[str]:
        """
        Stream reply text fragments for ``message`` given prior turns.

        Args:
            message: The user's new message
            history: Prior turns as ``{"role": ..., "parts": [{"text": ...}]}``

        Yields:
            Text fragments in arrival order
        """
        ...
