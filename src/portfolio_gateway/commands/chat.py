"""
Chat Streaming Command.

``startChatStream`` is live-only. The chat model's fragments are pumped by
a producer task into a bounded asyncio.Queue; the response iterates the
queue. Closing the iterator (client disconnect) cancels the producer.

Failure semantics:
    - Before the first fragment: the handler raises, so the dispatcher
      answers with a uniform ``{error}`` response
    - After output has started: iteration raises StreamFailure and the
      response ends; bytes already sent are not retracted
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional, Union

from portfolio_gateway.commands.names import CommandName
from portfolio_gateway.commands.payloads import ChatPayload, parse_payload
from portfolio_gateway.commands.registry import CommandInfo
from portfolio_gateway.interfaces.chat_model import ChatModel
from portfolio_gateway.resilience.errors import StreamFailure

logger = logging.getLogger(__name__)

TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


class _EndOfStream:
    pass


class _Failed:
    def __init__(self, error: BaseException) -> None:
        self.error = error


_END = _EndOfStream()
_Item = Union[bytes, _EndOfStream, _Failed]


class ChatStream:
    """
    Byte stream of a live chat reply.

    Usage:
        stream = await ChatStream(model.stream(message, history)).start()
        async for chunk in stream:
            ...
    """

    media_type = TEXT_MEDIA_TYPE

    def __init__(self, fragments: AsyncIterator[str], max_buffered: int = 64) -> None:
        self._fragments = fragments
        self._queue: "asyncio.Queue[_Item]" = asyncio.Queue(maxsize=max_buffered)
        self._producer: Optional[asyncio.Task] = None
        self._first: Optional[_Item] = None

    @property
    def producer_done(self) -> bool:
        return self._producer is not None and self._producer.done()

    async def start(self) -> "ChatStream":
        """
        Start the producer and wait for the first fragment.

        Raises:
            Exception: Whatever the chat model raised before producing output
        """
        self._producer = asyncio.create_task(self._produce())
        try:
            first = await self._queue.get()
        except asyncio.CancelledError:
            self.cancel()
            raise
        if isinstance(first, _Failed):
            raise first.error
        self._first = first
        return self

    async def _produce(self) -> None:
        try:
            async for text in self._fragments:
                if text:
                    await self._queue.put(text.encode("utf-8"))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await self._queue.put(_Failed(e))
            return
        finally:
            aclose = getattr(self._fragments, "aclose", None)
            if aclose is not None:
                await aclose()
        await self._queue.put(_END)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        if self._producer is None:
            raise RuntimeError("ChatStream.start() was not awaited")
        try:
            item = self._first
            self._first = None
            while True:
                if item is None:
                    item = await self._queue.get()
                if isinstance(item, _EndOfStream):
                    return
                if isinstance(item, _Failed):
                    logger.error(f"Chat stream terminated: {item.error!r}")
                    raise StreamFailure(f"chat stream terminated: {item.error}") from item.error
                yield item
                item = None
        finally:
            self.cancel()

    def cancel(self) -> None:
        """Stop the producer if it is still running."""
        if self._producer is not None and not self._producer.done():
            logger.info("Chat stream closed early; cancelling producer")
            self._producer.cancel()

    async def aclose(self) -> None:
        self.cancel()
        if self._producer is not None:
            await asyncio.wait({self._producer})


class ChatCommands:
    """Handler for ``startChatStream``."""

    def __init__(self, chat_model: ChatModel) -> None:
        self.chat_model = chat_model

    async def handle_start_chat_stream(self, payload: Any) -> ChatStream:
        params = parse_payload(CommandName.START_CHAT_STREAM.value, ChatPayload, payload)
        fragments = self.chat_model.stream(params.message, params.history)
        return await ChatStream(fragments).start()

    def handlers(self) -> Dict[CommandName, CommandInfo]:
        return {
            CommandName.START_CHAT_STREAM: CommandInfo(
                CommandName.START_CHAT_STREAM,
                self.handle_start_chat_stream,
                streaming=True,
            )
        }
