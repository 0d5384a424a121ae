# app/core/events.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class AuthEvent:
    kind: str  # signed_in, signed_out
    principal: str
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Listener = Callable[[AuthEvent], Union[None, Awaitable[None]]]


class EventChannel:
    """Fan-out of auth state changes to subscribed listeners."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if result is not None and hasattr(result, "__await__"):
                    await result
            except Exception as e:
                logger.error(f"Auth listener failed for {event.kind} of {event.principal}: {str(e)}")

    def clear(self) -> None:
        self._listeners.clear()


def log_auth_event(event: AuthEvent) -> None:
    logger.info(f"Auth state change: {event.kind} ({event.principal})")


def create_auth_dispatcher(channel: Optional[EventChannel] = None) -> EventChannel:
    channel = channel or EventChannel()
    channel.subscribe(log_auth_event)
    return channel
