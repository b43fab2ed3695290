from abc import ABC, abstractmethod
from typing import Any


class ProxyController(ABC):
    """
    Abstract base class for the proxy server under test.

    Implementations are constructed as ``Controller(output, log_service, host_runtime)``
    where ``output`` exposes ``append_line(str)``, ``log_service`` is an opaque log sink
    and ``host_runtime`` is the injected HostRuntime capability set.
    """

    @abstractmethod
    async def start_from_configuration(self, config: Any):
        """
        Start the local proxy server and return once it is listening.

        Args:
            config: Lookup object with ``get(key, default)`` over the dotted keys
                ``remote.protocol``, ``remote.host``, ``remote.port``,
                ``remote.basePath``, ``remote.apiKey``, ``server.host``,
                ``server.port`` and ``openai.basePath``.
        """

    @abstractmethod
    async def stop_server(self):
        """
        Stop the proxy server and return once it is fully torn down.
        """
