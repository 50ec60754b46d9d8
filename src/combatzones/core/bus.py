"""In-process event bus connecting host triggers to the zone controller."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe bus.

    The host's event loop is single-threaded, so delivery happens inline on
    the publishing call. Subscribers are invoked in subscription order on a
    snapshot of the list, so a callback may unsubscribe itself safely.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, event: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register ``callback`` for ``event``; returns an unsubscribe handle."""
        key = str(getattr(event, "value", event))
        self._subscribers[key].append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(key, callback)

        return _unsubscribe

    def unsubscribe(self, event: str, callback: Callable[..., Any]) -> None:
        key = str(getattr(event, "value", event))
        if callback in self._subscribers.get(key, []):
            self._subscribers[key].remove(callback)

    def subscriber_count(self, event: str) -> int:
        key = str(getattr(event, "value", event))
        return len(self._subscribers.get(key, []))

    def publish(self, event: str, **kwargs: Any) -> None:
        key = str(getattr(event, "value", event))
        for callback in list(self._subscribers.get(key, [])):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("EventBus callback error on '%s'", key)
