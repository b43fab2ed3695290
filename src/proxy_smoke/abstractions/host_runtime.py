from abc import ABC, abstractmethod
from typing import Any, Callable, Type

Listener = Callable[[Any], Any]


class Disposable(ABC):
    """
    Handle returned when subscribing; disposing it undoes the subscription.
    """

    @abstractmethod
    def dispose(self):
        """Release the resource held by this handle."""


class EventEmitter(ABC):
    """
    Abstract change-notification source as expected by the proxy under test.
    """

    @abstractmethod
    def event(self, listener: Listener) -> Disposable:
        """
        Register a listener for fired values.

        Args:
            listener (Listener): Callable invoked with each fired value.

        Returns:
            Disposable: Handle that removes exactly this listener.
        """

    @abstractmethod
    def fire(self, value: Any = None):
        """
        Invoke every registered listener with ``value``.
        """

    @abstractmethod
    def dispose(self):
        """
        Remove all listeners.
        """


class HostRuntime(ABC):
    """
    Capability set a proxy controller receives from its host environment.
    """

    EventEmitter: Type[EventEmitter]
