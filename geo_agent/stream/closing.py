"""Async iterators that always release the stream they read from."""

from collections import deque
from typing import Any, AsyncIterable, Awaitable, Callable, Iterable, Optional


class ClosingStream:
    """
    Map each item of an async source to zero or more output items.

    ``aclose()`` releases the source whether or not iteration has started,
    which an async generator's ``finally`` block cannot do. The source is
    also released when it is exhausted or raises.

    Args:
        source: Async iterable to read from.
        transform: Maps one source item to an iterable of output items.
        close: Coroutine function releasing the source. Defaults to the
            source's own ``aclose``.
    """

    def __init__(
        self,
        source: AsyncIterable[Any],
        transform: Callable[[Any], Iterable[Any]],
        close: Optional[Callable[[], Awaitable[Any]]] = None,
    ):
        self._source = source
        self._iterator = source.__aiter__()
        self._transform = transform
        self._close = close
        self._pending: deque = deque()
        self.closed = False

    def __aiter__(self) -> "ClosingStream":
        return self

    async def __anext__(self) -> Any:
        while not self._pending:
            if self.closed:
                raise StopAsyncIteration
            try:
                item = await self._iterator.__anext__()
            except StopAsyncIteration:
                await self.aclose()
                raise
            except BaseException:
                await self.aclose()
                raise
            self._pending.extend(self._transform(item))
        return self._pending.popleft()

    async def aclose(self) -> None:
        """Release the source. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self._pending.clear()
        if self._iterator is not self._source:
            await _aclose(self._iterator)
        if self._close is not None:
            await self._close()
        else:
            await _aclose(self._source)


async def _aclose(obj: Any) -> None:
    aclose = getattr(obj, "aclose", None)
    if aclose is not None:
        await aclose()
