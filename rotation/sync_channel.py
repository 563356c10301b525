"""
Sync Channel between the rotation controller and the display surface host.

Two directions share one object:

- events (host -> controller): named, multiplexed publish/subscribe. Each
  ``listen`` returns an unlisten callable.
- commands (controller -> host): named fire-and-forget calls dispatched to
  whichever handler the host registered. No return value is consumed.

Delivery is at-most-once with no acknowledgement or retry. Exceptions raised
by listeners or command handlers are logged and never reach the sender.

In deferred mode every delivery is posted to the Qt event loop, so senders
never run receiver code inline. Immediate mode delivers synchronously, which
keeps unit tests deterministic.
"""
from __future__ import annotations

import threading
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from core.logging.logger import get_logger
from core.logging.tags import TAG_CHANNEL
from core.timers import single_shot

logger = get_logger(__name__)


class SyncEvent:
    """Event names emitted by the host."""
    RESET_TIMER = "reset-timer"
    KEYUP = "keyup"
    CHANGE_INDEX = "change-index"
    WINDOW_DESTROYED = "window-destroyed"


class HostCommand:
    """Command names issued by the controller."""
    CREATE_WINDOW = "create_window"
    CHANGE_URL = "change_url"
    SET_PAGE_CHANGE_TIMESTAMP = "set_page_change_timestamp"


@dataclass
class ChannelEvent:
    """One delivered event."""
    name: str
    payload: Any = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    timestamp: float = field(default_factory=time.time)


@dataclass
class _Listener:
    callback: Callable[[ChannelEvent], None]
    name: str
    priority: int = 50
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    active: bool = True

    def __lt__(self, other: "_Listener") -> bool:
        # Higher priority first
        return self.priority > other.priority


def _require_name(kind: str, name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{kind} name must be a non-empty string")


class SyncChannel:
    """
    Named bidirectional transport between controller and display surface.

    Listeners for one event run in priority order (higher first). A listener
    that raises is logged and the remaining listeners still run.
    """

    def __init__(self, deferred: bool = False, max_history: int = 200):
        """
        Args:
            deferred: Post deliveries to the Qt event loop instead of
                running them inline. Requires a QCoreApplication.
            max_history: Number of emitted events kept for diagnostics.
        """
        self._deferred = deferred
        self._listeners: Dict[str, List[_Listener]] = defaultdict(list)
        self._listener_map: Dict[str, _Listener] = {}
        self._commands: Dict[str, Callable[..., Any]] = {}
        self._history: List[ChannelEvent] = []
        self._max_history = max_history
        self._closed = False
        self._lock = threading.RLock()

        logger.debug("%s SyncChannel created (deferred=%s)", TAG_CHANNEL, deferred)

    @property
    def deferred(self) -> bool:
        return self._deferred

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Events (host -> controller)
    # ------------------------------------------------------------------

    def listen(
        self,
        name: str,
        callback: Callable[[ChannelEvent], None],
        priority: int = 50,
    ) -> Callable[[], None]:
        """
        Subscribe to a named event.

        Args:
            name: Event name (see SyncEvent)
            callback: Called with the ChannelEvent
            priority: Higher runs earlier, default 50

        Returns:
            Zero-arg callable removing the subscription (idempotent).

        Raises:
            ValueError: If the name is blank or callback is not callable
        """
        _require_name("Event", name)
        if not callable(callback):
            raise ValueError("Callback must be callable")

        listener = _Listener(callback, name, priority)
        with self._lock:
            self._listeners[name].append(listener)
            self._listeners[name].sort()
            self._listener_map[listener.id] = listener

        logger.debug("%s Listening: %s for %s (priority=%d)", TAG_CHANNEL, listener.id, name, priority)
        return lambda: self.unlisten(listener.id)

    def unlisten(self, listener_id: str) -> None:
        with self._lock:
            listener = self._listener_map.pop(listener_id, None)
            if listener is None:
                return
            listener.active = False
            remaining = [l for l in self._listeners.get(listener.name, []) if l.id != listener_id]
            if remaining:
                self._listeners[listener.name] = remaining
            else:
                self._listeners.pop(listener.name, None)

        logger.debug("%s Unlistened: %s", TAG_CHANNEL, listener_id)

    def emit(self, name: str, payload: Any = None) -> ChannelEvent:
        """
        Publish an event to every listener of ``name``.

        Returns:
            The ChannelEvent (already delivered in immediate mode).
        """
        _require_name("Event", name)
        event = ChannelEvent(name, payload)
        if self._closed:
            logger.debug("%s Dropped %s on closed channel", TAG_CHANNEL, name)
            return event

        self._add_to_history(event)
        if self._deferred:
            single_shot(0, self._deliver, event)
        else:
            self._deliver(event)
        return event

    def _deliver(self, event: ChannelEvent) -> None:
        with self._lock:
            listeners = tuple(self._listeners.get(event.name, ()))

        if not listeners:
            logger.debug("%s No listeners for %s", TAG_CHANNEL, event.name)
            return

        for listener in listeners:
            if not listener.active:
                continue
            try:
                listener.callback(event)
            except Exception as e:
                logger.error(f"Error in listener for {event.name}: {e}", exc_info=True)

    def _add_to_history(self, event: ChannelEvent) -> None:
        with self._lock:
            self._history.append(event)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]

    def get_history(self, limit: int = 50) -> List[ChannelEvent]:
        with self._lock:
            return self._history[-limit:]

    def listener_count(self, name: Optional[str] = None) -> int:
        with self._lock:
            if name is None:
                return len(self._listener_map)
            return len(self._listeners.get(name, []))

    # ------------------------------------------------------------------
    # Commands (controller -> host)
    # ------------------------------------------------------------------

    def register_command(self, name: str, handler: Callable[..., Any]) -> Callable[[], None]:
        """
        Bind the handler for a command. A later registration replaces it.

        Returns:
            Zero-arg callable removing the binding if still current.
        """
        _require_name("Command", name)
        if not callable(handler):
            raise ValueError("Handler must be callable")

        with self._lock:
            if name in self._commands:
                logger.debug("%s Replacing handler for command %s", TAG_CHANNEL, name)
            self._commands[name] = handler

        def _unregister() -> None:
            with self._lock:
                if self._commands.get(name) is handler:
                    del self._commands[name]

        return _unregister

    def has_command(self, name: str) -> bool:
        with self._lock:
            return name in self._commands

    def invoke(self, name: str, **kwargs: Any) -> None:
        """Fire-and-forget command dispatch. Unknown commands are dropped."""
        _require_name("Command", name)
        if self._closed:
            logger.debug("%s Dropped command %s on closed channel", TAG_CHANNEL, name)
            return

        if self._deferred:
            single_shot(0, self._run_command, name, kwargs)
        else:
            self._run_command(name, kwargs)

    def _run_command(self, name: str, kwargs: Dict[str, Any]) -> None:
        with self._lock:
            handler = self._commands.get(name)

        if handler is None:
            logger.debug("%s No handler for command %s", TAG_CHANNEL, name)
            return

        try:
            handler(**kwargs)
        except Exception as e:
            logger.error(f"Error in command handler for {name}: {e}", exc_info=True)

    # ------------------------------------------------------------------

    def close(self) -> None:
        """Drop every listener and command binding. Further traffic is ignored."""
        with self._lock:
            for listener in self._listener_map.values():
                listener.active = False
            self._listeners.clear()
            self._listener_map.clear()
            self._commands.clear()
            self._closed = True

        logger.info("%s SyncChannel closed", TAG_CHANNEL)
