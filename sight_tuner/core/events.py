"""Event system for Sight Tuner components."""

from typing import Any, Callable, Dict, List
from enum import Enum, auto

from ..logger import get_logger
from .interfaces import IRenderer

logger = get_logger(__name__)


class TunerEventType(Enum):
    """Event types published by the tuner pipeline."""

    VALUE_CHANGED = auto()
    GUESS_EVALUATED = auto()
    TARGET_CHANGED = auto()


class EventEmitter:
    """Dispatches tuner events to listeners in registration order.

    Listeners run on the thread that emits, which for the tuner is the frame
    loop. A listener may unsubscribe itself while being called.
    """

    def __init__(self):
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        listeners = self._listeners.setdefault(event_type, [])
        if callback not in listeners:
            listeners.append(callback)
            logger.debug(f"Listening for {event_type}: {callback!r}")

    def off(self, event_type: Any, callback: Callable) -> bool:
        """Unsubscribe ``callback``; returns False if it was not registered."""
        listeners = self._listeners.get(event_type, [])
        if callback not in listeners:
            return False
        listeners.remove(callback)
        if not listeners:
            del self._listeners[event_type]
        return True

    def listener_count(self, event_type: Any) -> int:
        return len(self._listeners.get(event_type, []))

    def emit(self, event_type: Any, *args) -> int:
        """Call every listener for ``event_type``; returns how many failed.

        Errors are logged and the remaining listeners still run.
        """
        failures = 0
        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(*args)
            except Exception as e:
                failures += 1
                logger.error(f"Listener {callback!r} failed on {event_type}: {e}", exc_info=True)
        return failures

    def clear(self) -> None:
        self._listeners.clear()


class TunerEvents:
    """Event emitter specifically for tuner output."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_value(self, callback: Callable) -> None:
        self._emitter.on(TunerEventType.VALUE_CHANGED, callback)

    def on_guess(self, callback: Callable) -> None:
        self._emitter.on(TunerEventType.GUESS_EVALUATED, callback)

    def on_target(self, callback: Callable) -> None:
        self._emitter.on(TunerEventType.TARGET_CHANGED, callback)

    def attach_renderer(self, renderer: IRenderer) -> None:
        """Wire all tuner events to a rendering collaborator."""
        self.on_value(renderer.show_value)
        self.on_guess(renderer.show_guess)
        self.on_target(renderer.show_target)

    def detach_renderer(self, renderer: IRenderer) -> None:
        self._emitter.off(TunerEventType.VALUE_CHANGED, renderer.show_value)
        self._emitter.off(TunerEventType.GUESS_EVALUATED, renderer.show_guess)
        self._emitter.off(TunerEventType.TARGET_CHANGED, renderer.show_target)

    def emit_value(self, text: str) -> None:
        self._emitter.emit(TunerEventType.VALUE_CHANGED, text)

    def emit_guess(self, result) -> None:
        self._emitter.emit(TunerEventType.GUESS_EVALUATED, result)

    def emit_target(self, note: str, commands) -> None:
        self._emitter.emit(TunerEventType.TARGET_CHANGED, note, commands)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
