"""
Gemini Chat Model.

Streams chat replies from the Gemini API through the google-genai SDK.
Chat is live-only: SDK errors are raised as UpstreamFailure and the chat
command turns them into an error response or a terminated stream.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from google import genai
from google.genai import errors, types

from portfolio_gateway.resilience.errors import UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiChatModel:
    """ChatModel backed by ``genai.Client().aio.chats``."""

    SOURCE = "chat"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        system_instruction: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        """
        Initialize chat model.

        Args:
            api_key: Gemini API key; without one every stream fails
            model: Model name
            system_instruction: Optional system prompt for every chat
            client: Pre-built SDK client
        """
        self._api_key = api_key
        self._model = model
        self._system_instruction = system_instruction
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise UpstreamFailure(self.SOURCE, "Missing GEMINI_API_KEY")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def stream(
        self,
        message: str,
        history: List[Dict[str, Any]],
    ) -> AsyncIterator[str]:
        client = self._get_client()
        config = None
        if self._system_instruction:
            config = types.GenerateContentConfig(
                system_instruction=self._system_instruction
            )
        chat = client.aio.chats.create(model=self._model, history=history, config=config)

        try:
            async for chunk in await chat.send_message_stream(message):
                if chunk.text:
                    yield chunk.text
        except errors.APIError as e:
            raise UpstreamFailure(self.SOURCE, e.message or str(e), status_code=e.code) from e
