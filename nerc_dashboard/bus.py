"""Synchronous publish/subscribe registry linking the dashboard views."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

CATEGORY_SELECTED = "category_selected"
REGION_SELECTED = "region_selected"

Handler = Callable[[Any], None]


class UnknownEventError(KeyError):
    pass


class EventBus:
    """Named events; ``emit`` calls each handler in registration order."""

    def __init__(self, *event_names: str) -> None:
        self._handlers: Dict[str, List[Handler]] = {name: [] for name in event_names}

    @property
    def event_names(self) -> List[str]:
        return list(self._handlers)

    def register(self, event_name: str, handler: Handler) -> None:
        self._handlers_for(event_name).append(handler)

    def emit(self, event_name: str, payload: Any = None) -> None:
        handlers = list(self._handlers_for(event_name))
        logger.debug("emit %s to %d handler(s): %r", event_name, len(handlers), payload)
        for handler in handlers:
            handler(payload)

    def _handlers_for(self, event_name: str) -> List[Handler]:
        try:
            return self._handlers[event_name]
        except KeyError:
            raise UnknownEventError(f"unknown event: {event_name!r}") from None
