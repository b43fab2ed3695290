import logging
from typing import Any, Dict

from proxy_smoke.abstractions.host_runtime import (
    Disposable,
    EventEmitter,
    HostRuntime,
    Listener,
)

logger = logging.getLogger(__name__)


class ListenerDisposable(Disposable):
    def __init__(self, emitter: "SimpleEventEmitter", token: int):
        self._emitter = emitter
        self._token = token

    def dispose(self):
        self._emitter._listeners.pop(self._token, None)


class SimpleEventEmitter(EventEmitter):
    """
    In-process event emitter standing in for the host runtime's implementation.
    """

    def __init__(self):
        # token -> listener; dicts keep registration order
        self._listeners: Dict[int, Listener] = {}
        self._next_token = 0

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def event(self, listener: Listener) -> Disposable:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return ListenerDisposable(self, token)

    def fire(self, value: Any = None):
        """
        Call every listener registered at the time of firing. A listener that raises
        is logged and skipped; the error never reaches the caller.
        """
        for listener in list(self._listeners.values()):
            try:
                listener(value)
            except Exception:
                logger.exception("Listener error")

    def dispose(self):
        self._listeners.clear()


class StubHostRuntime(HostRuntime):
    """
    Host runtime handed to the proxy controller for the lifetime of the harness.
    """

    EventEmitter = SimpleEventEmitter
