import asyncio
from typing import Any, Callable, Dict, List, Optional

from ..utils.logger import logger

_CLOSED = object()

ToItem = Callable[[Any], Optional[Dict[str, Any]]]


def document_to_item(doc) -> Optional[Dict[str, Any]]:
    """Plain dict of a snapshot document carrying its id; None for missing documents."""
    if not getattr(doc, "exists", True):
        return None
    return {**(doc.to_dict() or {}), "id": doc.id}


def snapshot_to_items(docs, to_item: ToItem = document_to_item) -> List[Dict[str, Any]]:
    items = []
    for doc in docs:
        item = to_item(doc)
        if item is not None:
            items.append(item)
    return items


class SnapshotSubscription:
    """
    A live listener on a sync Firestore query, collection or document reference.

    Every change delivers the complete current result set to `callback` (consumers replace
    their copy, they never patch it). With `with_changes=True` the callback also receives
    the raw change list. `to_item` converts each document and may return None to drop it.
    Listener callbacks run on a background thread; pass `loop` to have them scheduled on an
    asyncio loop instead. Call `unsubscribe()` when done.
    """

    def __init__(
        self,
        query,
        callback: Callable[..., Any],
        with_changes: bool = False,
        on_error: Optional[Callable[[Exception], Any]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        name: str = "",
        to_item: ToItem = document_to_item,
    ):
        self._callback = callback
        self._with_changes = with_changes
        self._on_error = on_error
        self._loop = loop
        self._to_item = to_item
        self.name = name or getattr(query, "id", "") or "query"
        self._active = True
        self._watch = query.on_snapshot(self._on_snapshot)
        logger.debug(f"👂 Listening to {self.name}")

    @property
    def active(self) -> bool:
        return self._active

    def _on_snapshot(self, docs, changes, read_time):
        if not self._active:
            return
        try:
            items = snapshot_to_items(docs, self._to_item)
            args = (items, changes) if self._with_changes else (items,)
            if self._loop is not None:
                self._loop.call_soon_threadsafe(self._callback, *args)
            else:
                self._callback(*args)
        except Exception as e:
            logger.error(f"❌ Error handling snapshot for {self.name}: {str(e)}")
            if self._on_error is not None:
                self._on_error(e)

    def unsubscribe(self):
        if not self._active:
            return
        self._active = False
        self._watch.unsubscribe()
        self._watch = None
        logger.debug(f"🔕 Stopped listening to {self.name}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


class SnapshotStream:
    """
    Async iterator over listener snapshots.

        async with SnapshotStream(query) as stream:
            async for items in stream:
                ...

    Must be created inside a running event loop. `aclose()` removes the listener and ends
    the iteration.
    """

    def __init__(self, query, name: str = "", to_item: ToItem = document_to_item):
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._subscription = SnapshotSubscription(query, self._push, name=name, to_item=to_item)

    def _push(self, items):
        self._loop.call_soon_threadsafe(self._queue.put_nowait, items)

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[Dict[str, Any]]:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        items = await self._queue.get()
        if items is _CLOSED:
            raise StopAsyncIteration
        return items

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        self._subscription.unsubscribe()
        self._queue.put_nowait(_CLOSED)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
