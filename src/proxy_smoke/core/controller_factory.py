"""
Factory for wiring the proxy controller under test with its collaborators.
"""
import importlib
import logging
from typing import Any, Optional, Type

from proxy_smoke.abstractions.host_runtime import HostRuntime
from proxy_smoke.abstractions.proxy_controller import ProxyController
from proxy_smoke.contracts.harness_options import HarnessOptions
from proxy_smoke.core.event_emitter import StubHostRuntime
from proxy_smoke.core.output_channel import ConsoleOutputChannel

logger = logging.getLogger(__name__)


def import_from_string(path: str) -> Type[Any]:
    """
    Import ``package.module.ClassName`` (or ``package.module:ClassName``).

    Raises:
        ImportError: If the module or attribute cannot be loaded.
    """
    module_name, sep, class_name = path.rpartition(":")
    if not sep:
        module_name, _, class_name = path.rpartition(".")
    if not module_name or not class_name:
        raise ImportError(f"Invalid import path '{path}'")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        logger.error(f"Could not import '{path}': {e}")
        raise ImportError(f"Could not import '{path}': {e}") from e


class ControllerFactory:
    """
    Factory class for creating proxy controller instances.
    """

    @staticmethod
    def create_controller(
        options: HarnessOptions,
        output: Optional[Any] = None,
        host_runtime: Optional[HostRuntime] = None,
    ) -> ProxyController:
        """
        Build the proxy controller named by ``options.proxy_controller``.

        The controller receives the output channel, a fresh log service instance and
        the host runtime as constructor arguments.

        Args:
            options (HarnessOptions): Options carrying the dotted class paths.
            output (Optional[Any]): Object with ``append_line``; defaults to the console.
            host_runtime (Optional[HostRuntime]): Capability set to inject; defaults
                to StubHostRuntime.

        Returns:
            ProxyController: The wired controller.

        Raises:
            ImportError: If no controller is configured or a class cannot be imported.
        """
        if not options.proxy_controller:
            raise ImportError(
                "No proxy controller configured. Pass --proxy-controller "
                "or set PROXY_CONTROLLER_CLASS."
            )

        controller_cls = import_from_string(options.proxy_controller)
        log_service_cls = import_from_string(options.log_service)
        logger.info(
            f"Creating proxy controller {options.proxy_controller} "
            f"with log service {options.log_service}"
        )
        return controller_cls(
            output or ConsoleOutputChannel(),
            log_service_cls(),
            host_runtime or StubHostRuntime(),
        )
