from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from .logger import logger
from .standard_response import StandardResponse

T = TypeVar("T")

Fetch = Callable[[], Awaitable[StandardResponse]]
Persist = Callable[[], Awaitable[StandardResponse]]


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def _patched(item: Any, patch: Dict[str, Any]) -> Any:
    if isinstance(item, BaseModel):
        return item.model_copy(update=patch)
    if isinstance(item, dict):
        return {**item, **patch}
    raise TypeError(f"Cannot patch item of type {type(item).__name__}")


class CollectionState(Generic[T]):
    """
    In-memory view of one collection for a screen: `data`, `loading`, `error`.

    `refetch()` reloads through `fetch` (a data-access call returning a StandardResponse
    whose data is the item list). `start_live()` keeps `data` in step with a listener:
    `subscribe(callback)` must register `callback(items)` and return an object with
    `unsubscribe()`. `parse` converts raw listener dicts into items.
    """

    def __init__(
        self,
        fetch: Fetch,
        subscribe: Optional[Callable[[Callable[[List[Dict[str, Any]]], None]], Any]] = None,
        parse: Optional[Callable[[Dict[str, Any]], T]] = None,
        name: str = "collection",
    ):
        self._fetch = fetch
        self._subscribe = subscribe
        self._parse = parse
        self._subscription = None
        self.name = name
        self.data: List[T] = []
        self.loading = False
        self.error: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self._subscription is not None

    async def refetch(self) -> StandardResponse:
        self.loading = True
        try:
            response = await self._fetch()
        except Exception as e:
            logger.error(f"❌ Error loading {self.name}: {str(e)}")
            response = StandardResponse.internal_error(str(e))
        finally:
            self.loading = False

        if response.status:
            self.data = list(response.data or [])
            self.error = None
        else:
            # keep whatever was shown before; the screen offers a retry
            self.error = response.error_message or response.message
        return response

    def _replace(self, items: List[Dict[str, Any]]):
        self.data = [self._parse(item) for item in items] if self._parse else list(items)
        self.error = None
        self.loading = False

    def _listener_failed(self, error: Exception):
        self.error = str(error)
        self.loading = False

    def start_live(self):
        if self._subscribe is None:
            raise RuntimeError(f"{self.name} has no live source")
        if self._subscription is not None:
            return self._subscription
        self.loading = True
        self._subscription = self._subscribe(self._replace)
        return self._subscription

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self.data):
            if _item_id(item) == item_id:
                return index
        return None

    async def optimistic_update(self, item_id: str, patch: Dict[str, Any], persist: Persist) -> StandardResponse:
        """
        Apply `patch` to the cached item right away, then run `persist`. A failed write puts
        the previous item back and returns the failure.
        """
        index = self._index_of(item_id)
        previous = self.data[index] if index is not None else None
        if index is not None:
            self.data[index] = _patched(previous, patch)

        try:
            response = await persist()
        except Exception as e:
            logger.error(f"❌ Error persisting {self.name} '{item_id}': {str(e)}")
            response = StandardResponse.internal_error(str(e))

        if not response.status and previous is not None:
            restore_at = self._index_of(item_id)
            if restore_at is not None:
                self.data[restore_at] = previous
            logger.warning(f"⚠️ Reverted optimistic update of {self.name} '{item_id}'")
        return response
